"""
Module: test_session_cache.py
Description: Unit tests for local stores and the session parameter cache.

Covers the memory and file stores, store selection from settings, and
the best-effort contract: cache failures are swallowed.
"""

import json

import pytest

from roastsim.config.settings import Settings
from roastsim.models.session import SessionParameters
from roastsim.storage import (
    SESSION_CACHE_KEY,
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    SessionParamsCache,
    build_store,
)


class BrokenStore:
    """Store whose reads and writes always fail."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")


class TestLocalStores:
    """Memory and file stores."""

    def test_memory_store(self):
        store = MemoryKeyValueStore()

        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert isinstance(store, KeyValueStore)

    def test_file_store_persists(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        FileKeyValueStore(path).set("k", "v")

        assert FileKeyValueStore(path).get("k") == "v"
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_file_store_missing_file(self, tmp_path):
        assert FileKeyValueStore(tmp_path / "absent.json").get("k") is None

    def test_file_store_rejects_non_object(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ValueError):
            FileKeyValueStore(path).get("k")

    def test_file_store_requires_path(self):
        with pytest.raises(ValueError):
            FileKeyValueStore("")

    def test_build_store(self, tmp_path):
        assert isinstance(build_store(Settings(_env_file=None)), MemoryKeyValueStore)

        file_store = build_store(Settings(
            _env_file=None,
            session_store_backend="file",
            session_store_path=str(tmp_path / "s.json")
        ))
        assert isinstance(file_store, FileKeyValueStore)

        with pytest.raises(ValueError, match="session_table_name"):
            build_store(Settings(_env_file=None, session_store_backend="dynamodb"))


class TestSessionParamsCache:
    """Best-effort session parameter caching."""

    def test_save_and_load(self, session_params):
        store = MemoryKeyValueStore()
        cache = SessionParamsCache(store)

        assert cache.save(session_params) is True
        assert store.get(SESSION_CACHE_KEY) is not None
        assert cache.load() == session_params

    def test_load_empty(self):
        assert SessionParamsCache(MemoryKeyValueStore()).load() is None

    def test_write_failure_is_swallowed(self, session_params):
        cache = SessionParamsCache(BrokenStore())

        assert cache.save(session_params) is False

    def test_read_failure_is_swallowed(self):
        assert SessionParamsCache(BrokenStore()).load() is None

    def test_unreadable_entry_is_discarded(self):
        store = MemoryKeyValueStore()
        store.set(SESSION_CACHE_KEY, "{not json")

        assert SessionParamsCache(store).load() is None

        store.set(SESSION_CACHE_KEY, '["a", "list"]')
        assert SessionParamsCache(store).load() is None

    def test_cache_over_file_store(self, tmp_path):
        cache = SessionParamsCache(FileKeyValueStore(tmp_path / "store.json"))
        params = SessionParameters(session_id="sess-9", api_key="k", callback_url="https://cb.example/x")

        cache.save(params)

        assert cache.load().plain_api_key == "k"
