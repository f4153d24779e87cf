"""
Module: push.py
Description: Push result payloads to the session callback endpoint.

Implements HTTPS POST delivery with a per-attempt timeout, exponential
backoff between failed attempts, and classification of every failure
into ConfigurationError or DeliveryError.
"""

import asyncio
import json
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import BaseModel, SecretStr

from roastsim.auth.credentials import build_delivery_headers, reveal_api_key
from roastsim.delivery.errors import (
    ConfigurationError,
    DeliveryError,
    TransientDeliveryError,
)
from roastsim.delivery.retry import (
    BACKOFF_BASE_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    DeliveryTracker,
    SleepFn,
    StateListener,
    build_retrying,
)
from roastsim.models.delivery import Acknowledgement
from roastsim.utils.logger import get_logger

logger = get_logger(__name__)

SECURE_SCHEME = "https://"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_ACK_MESSAGE = "OK"

Payload = Union[BaseModel, Mapping[str, Any]]


def serialize_payload(payload: Payload) -> bytes:
    """
    Serialize a payload to canonical UTF-8 JSON.

    Pydantic models are dumped in JSON mode first, so datetimes and
    nested models render exactly as their serializers define.

    Args:
        payload: ResultPayload or any JSON-compatible mapping

    Returns:
        UTF-8 encoded JSON body

    Raises:
        TypeError, ValueError: If the payload is not JSON-serializable
        RecursionError: If the payload is nested too deeply
    """
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode='json')
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise TypeError(f"payload must be a model or mapping, not {type(payload).__name__}")

    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        separators=(',', ':')
    ).encode('utf-8')


def validate_endpoint(endpoint_url: Any) -> str:
    """
    Check the callback endpoint before any network activity.

    Raises:
        ConfigurationError: If the URL is empty or not HTTPS
    """
    if not endpoint_url or not isinstance(endpoint_url, str):
        raise ConfigurationError("endpoint_url must be a non-empty string")
    if not endpoint_url.startswith(SECURE_SCHEME):
        raise ConfigurationError(f"insecure endpoint: callback_url must use {SECURE_SCHEME}")
    return endpoint_url


def parse_acknowledgement(response: httpx.Response) -> str:
    """Acknowledgement text: the body's message field, or OK."""
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ACK_MESSAGE

    if isinstance(body, dict) and isinstance(body.get('message'), str):
        return body['message']
    return DEFAULT_ACK_MESSAGE


class ResultDeliveryClient:
    """
    HTTP client delivering result payloads to a callback endpoint.

    Attempts are strictly sequential. A success ends the call at once; a
    failure is retried after a doubling backoff until the attempt budget
    is spent.

    Example:
        >>> client = ResultDeliveryClient()
        >>> ack = await client.deliver("https://cb.example/x", payload, "key123")
        >>> ack.message
        'stored'
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        backoff_base_seconds: float = BACKOFF_BASE_SECONDS,
        sleep: Optional[SleepFn] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize result delivery client.

        Args:
            timeout_seconds: HTTP timeout for each attempt
            backoff_base_seconds: Backoff unit, see retry.backoff_seconds
            sleep: Coroutine used for backoff waits (asyncio.sleep by default)
            transport: httpx transport override (used by tests)

        Raises:
            ValueError: If timeout_seconds is not positive
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self.timeout = httpx.Timeout(timeout_seconds)
        self.backoff_base_seconds = backoff_base_seconds
        self._sleep = sleep
        self._transport = transport

        logger.debug(
            "Result delivery client initialized",
            timeout_seconds=timeout_seconds,
            backoff_base_seconds=backoff_base_seconds
        )

    async def deliver(
        self,
        endpoint_url: str,
        payload: Payload,
        credential: Union[str, SecretStr],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        listener: Optional[StateListener] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Acknowledgement:
        """
        Deliver a payload, retrying transient failures.

        Args:
            endpoint_url: HTTPS callback URL
            payload: ResultPayload or JSON-compatible mapping, never mutated
            credential: API key sent as the x-api-key header
            max_attempts: Total number of network attempts (>= 1)
            listener: Called with (state, attempt) on each state transition
            cancel_event: When set, stops retrying after the current attempt

        Returns:
            Acknowledgement with the endpoint's message and attempt records

        Raises:
            ConfigurationError: Bad endpoint, credential or attempt budget;
                raised before any network call
            DeliveryError: Payload could not be serialized, or every attempt
                failed; wraps the last underlying error
        """
        validate_endpoint(endpoint_url)
        plain_key = reveal_api_key(credential)
        if not isinstance(plain_key, str) or not plain_key:
            raise ConfigurationError("credential must be a non-empty string")
        if not isinstance(max_attempts, int) or isinstance(max_attempts, bool) or max_attempts < 1:
            raise ConfigurationError("max_attempts must be a positive integer")

        headers = build_delivery_headers(credential)

        try:
            body = serialize_payload(payload)
        except Exception as e:
            logger.error(
                "Result payload serialization failed",
                error=str(e),
                error_type=type(e).__name__
            )
            raise DeliveryError(f"payload could not be serialized: {e}", cause=e) from e

        tracker = DeliveryTracker(listener)
        retrying = build_retrying(
            max_attempts,
            tracker,
            base_seconds=self.backoff_base_seconds,
            sleep=self._sleep,
            cancel_event=cancel_event
        )

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await retrying(self._post_once, client, endpoint_url, body, headers)
            except TransientDeliveryError as e:
                tracker.failed()
                cause = e.cause or e
                logger.error(
                    "Result delivery failed after all attempts",
                    endpoint_url=endpoint_url,
                    attempts=len(tracker.attempts),
                    error=str(e)
                )
                raise DeliveryError(
                    f"delivery failed after {len(tracker.attempts)} attempt(s): {e}",
                    attempts=tracker.attempts,
                    cause=cause
                ) from cause

        tracker.succeeded(response.status_code)
        message = parse_acknowledgement(response)

        logger.info(
            "Result delivered successfully",
            endpoint_url=endpoint_url,
            status_code=response.status_code,
            attempts=len(tracker.attempts),
            acknowledgement=message
        )

        return Acknowledgement(
            message=message,
            status_code=response.status_code,
            attempts=tracker.attempts
        )

    async def _post_once(
        self,
        client: httpx.AsyncClient,
        endpoint_url: str,
        body: bytes,
        headers: dict
    ) -> httpx.Response:
        """
        Make a single delivery attempt.

        Raises:
            TransientDeliveryError: On timeout, network error or non-2xx status
        """
        logger.debug("Attempting result delivery", endpoint_url=endpoint_url)

        try:
            response = await client.post(endpoint_url, content=body, headers=headers)
            response.raise_for_status()
            return response

        except httpx.TimeoutException as e:
            raise TransientDeliveryError("delivery attempt timed out", cause=e) from e

        except httpx.HTTPStatusError as e:
            raise TransientDeliveryError(
                f"callback returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                cause=e
            ) from e

        except httpx.HTTPError as e:
            raise TransientDeliveryError(f"delivery network error: {e}", cause=e) from e

        except Exception as e:
            logger.error(
                "Unexpected delivery attempt failure",
                endpoint_url=endpoint_url,
                error=str(e),
                error_type=type(e).__name__
            )
            raise TransientDeliveryError(f"delivery attempt failed: {e}", cause=e) from e


async def deliver(
    endpoint_url: str,
    payload: Payload,
    credential: Union[str, SecretStr],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    **client_options: Any
) -> Acknowledgement:
    """
    Deliver a payload with a one-off ResultDeliveryClient.

    Keyword options are passed to ResultDeliveryClient (timeout_seconds,
    backoff_base_seconds, sleep, transport).
    """
    client = ResultDeliveryClient(**client_options)
    return await client.deliver(endpoint_url, payload, credential, max_attempts)
