"""
Module: delivery/errors.py
Description: Error taxonomy for result delivery.

- ConfigurationError: caller misconfiguration found before any network call
- TransientDeliveryError: one failed attempt; retried inside the module
- DeliveryError: terminal failure once the attempt budget is spent

Only ConfigurationError and DeliveryError leave the delivery module.
"""

from typing import List, Optional

from roastsim.models.delivery import DeliveryAttempt


class ConfigurationError(ValueError):
    """Raised for bad delivery or launch configuration. Never retried."""


class TransientDeliveryError(Exception):
    """
    A single delivery attempt failed.

    Attributes:
        status_code: HTTP status of the response, if one was received
        cause: Underlying transport or protocol exception
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class DeliveryError(Exception):
    """
    Result delivery failed for good.

    Attributes:
        attempts: Record of every attempt made, in order
        cause: Failure observed on the last attempt
    """

    def __init__(
        self,
        message: str,
        attempts: Optional[List[DeliveryAttempt]] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.attempts = list(attempts or [])
        self.cause = cause

    @property
    def attempt_count(self) -> int:
        """Number of network attempts made before giving up."""
        return len(self.attempts)
