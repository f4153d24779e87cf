"""
Module: local.py
Description: Local key-value stores.

- MemoryKeyValueStore: process-local dict, the default backend
- FileKeyValueStore: single JSON document on disk, survives restarts
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

from roastsim.utils.logger import get_logger

logger = get_logger(__name__)


class MemoryKeyValueStore:
    """In-memory store."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore:
    """
    Key-value store backed by a JSON file.

    The whole document is rewritten on each set; writes go to a temporary
    sibling file first and are then moved into place.

    Attributes:
        path: Location of the JSON document
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file store.

        Args:
            path: JSON file path; parent directories are created on first write

        Raises:
            ValueError: If path is empty
        """
        if not path:
            raise ValueError("path must be a non-empty path")

        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        with self.path.open('r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"store file {self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp_path.open('w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

        logger.debug("Store file written", path=str(self.path), key=key)
