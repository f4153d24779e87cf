"""
Module: storage
Description: Package initialization for the key-value persistence layer.

This package contains the KeyValueStore capability and its implementations:
- base: KeyValueStore protocol
- local: in-memory and JSON file stores
- dynamodb: DynamoDB-backed store
- session_cache: best-effort cache of session parameters
"""

from .base import KeyValueStore
from .local import FileKeyValueStore, MemoryKeyValueStore
from .session_cache import SESSION_CACHE_KEY, SessionParamsCache, build_store

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "SessionParamsCache",
    "SESSION_CACHE_KEY",
    "build_store",
]
