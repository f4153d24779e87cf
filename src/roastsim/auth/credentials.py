"""
Module: credentials.py
Description: Session API key handling.

The API key arrives in the launch URL and is forwarded to the callback
endpoint as the x-api-key header. It is masked wherever it is displayed
or logged.

Key Components:
- mask_api_key(): Display form of an API key
- reveal_api_key(): Plain value from str or SecretStr
- build_delivery_headers(): Headers sent on every delivery attempt

Dependencies: pydantic, typing
"""

from typing import Dict, Optional, Union

from pydantic import SecretStr

API_KEY_HEADER = "x-api-key"
MASK = "*****"

Credential = Union[str, SecretStr]


def reveal_api_key(api_key: Optional[Credential]) -> Optional[str]:
    """
    Return the plain API key value.

    Args:
        api_key: Key as a plain string or SecretStr

    Returns:
        The plain key, or None when no key was provided
    """
    if api_key is None:
        return None
    if isinstance(api_key, SecretStr):
        return api_key.get_secret_value()
    return api_key


def mask_api_key(api_key: Optional[Credential]) -> Optional[str]:
    """
    Mask an API key for display.

    Args:
        api_key: Key as a plain string or SecretStr

    Returns:
        "*****" when a key is present, None otherwise

    Example:
        >>> mask_api_key("sk_live_123")
        '*****'
        >>> mask_api_key(None) is None
        True
    """
    return MASK if reveal_api_key(api_key) else None


def build_delivery_headers(api_key: Credential) -> Dict[str, str]:
    """
    Build the request headers for a result delivery.

    Args:
        api_key: Session API key

    Returns:
        Content type and x-api-key headers

    Raises:
        ValueError: If api_key is empty
    """
    plain = reveal_api_key(api_key)
    if not plain or not isinstance(plain, str):
        raise ValueError("api_key must be a non-empty string")

    return {
        'Content-Type': 'application/json',
        API_KEY_HEADER: plain,
    }
