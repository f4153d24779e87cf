"""
Package: delivery
Description: Result delivery to the session callback endpoint.

Provides HTTPS push delivery of result payloads and the retry policy
handling transient delivery failures.
"""

from .errors import ConfigurationError, DeliveryError, TransientDeliveryError
from .push import ResultDeliveryClient, deliver, serialize_payload
from .retry import DeliveryTracker, backoff_seconds

__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "TransientDeliveryError",
    "ResultDeliveryClient",
    "deliver",
    "serialize_payload",
    "DeliveryTracker",
    "backoff_seconds",
]
