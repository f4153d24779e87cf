"""
Module: params.py
Description: Session parameters from the launch URL.

The hosting platform opens the simulator with a URL whose query string
carries session_id, learner_id, resource_id, api_key, callback_url and
mode. Only the first value of a repeated parameter is used.
"""

from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from roastsim.models.session import SessionParameters

QUERY_KEYS = ('session_id', 'learner_id', 'resource_id', 'api_key', 'callback_url', 'mode')


def params_from_query(query: Mapping[str, Any]) -> SessionParameters:
    """
    Build session parameters from decoded query values.

    Args:
        query: Mapping of parameter name to a value or list of values

    Returns:
        SessionParameters; absent keys stay unset, mode defaults to learning
    """
    values = {}
    for key in QUERY_KEYS:
        value: Optional[Any] = query.get(key)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        values[key] = value
    return SessionParameters(**values)


def parse_launch_url(url: str) -> SessionParameters:
    """
    Parse a launch URL, or a bare query string, into session parameters.

    Example:
        >>> params = parse_launch_url("https://sim.example/?session_id=s1&mode=exam")
        >>> params.session_id, params.mode
        ('s1', 'exam')
    """
    if url is None:
        raise ValueError("url must be a string")

    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        query = parts.query
    else:
        query = url[1:] if url.startswith('?') else url
    return params_from_query(parse_qs(query, keep_blank_values=True))
