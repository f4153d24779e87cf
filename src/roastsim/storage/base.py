"""
Module: base.py
Description: Key-value store capability.

Stores hold string values under string keys. Implementations may raise
on read or write; callers that treat persistence as best-effort (see
session_cache) catch and log those failures.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal get/set store."""

    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...
