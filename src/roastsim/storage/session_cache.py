"""
Module: session_cache.py
Description: Best-effort cache of the current session parameters.

Session parameters are written under a fixed key so that a restarted
runner can pick the session up again. Cache reads and writes never fail
the caller: errors are logged and swallowed.
"""

import json
from typing import Optional

from pydantic import ValidationError

from roastsim.config.settings import Settings, settings as default_settings
from roastsim.models.session import SessionParameters
from roastsim.storage.base import KeyValueStore
from roastsim.storage.local import FileKeyValueStore, MemoryKeyValueStore
from roastsim.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_CACHE_KEY = "sim_session_params"


def build_store(config: Optional[Settings] = None) -> KeyValueStore:
    """
    Create the key-value store selected by settings.session_store_backend.

    Raises:
        ValueError: If the dynamodb backend is selected without a table name
    """
    config = config or default_settings

    if config.session_store_backend == 'file':
        return FileKeyValueStore(config.session_store_path)

    if config.session_store_backend == 'dynamodb':
        from roastsim.storage.dynamodb import DynamoDBKeyValueStore

        if not config.session_table_name:
            raise ValueError("session_table_name is required for the dynamodb store backend")
        return DynamoDBKeyValueStore(config.session_table_name, region_name=config.aws_region)

    return MemoryKeyValueStore()


class SessionParamsCache:
    """
    Session parameter cache over a KeyValueStore.

    Write failures are non-fatal: save() returns False instead of raising.
    Read failures and unreadable entries make load() return None.
    """

    def __init__(self, store: KeyValueStore, key: str = SESSION_CACHE_KEY):
        self.store = store
        self.key = key

    def save(self, params: SessionParameters) -> bool:
        """Write params to the store. Returns whether the write succeeded."""
        try:
            self.store.set(self.key, json.dumps(params.to_cache_dict()))
        except Exception as e:
            logger.warning(
                "Failed to cache session parameters",
                key=self.key,
                session_id=params.session_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return False

        logger.debug("Session parameters cached", key=self.key, session_id=params.session_id)
        return True

    def load(self) -> Optional[SessionParameters]:
        """Read the cached params, or None when absent or unreadable."""
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.warning(
                "Failed to read cached session parameters",
                key=self.key,
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        if raw is None:
            return None

        try:
            return SessionParameters.from_cache_dict(json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(
                "Discarding unreadable cached session parameters",
                key=self.key,
                error=str(e)
            )
            return None
