# src/brokerdesk/adapters/storage/local.py
"""
Local JSON File Storage Adapter

Durable key/value storage backed by one JSON file, the desktop stand-in for
the browser's localStorage. Values are opaque strings.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    Key/value storage persisted to a single JSON object on disk.

    Writes go through a temporary file and an atomic replace so a crash
    never leaves a half-written file behind.
    """

    def __init__(self, path: str):
        """
        Initialize file storage.

        Args:
            path: JSON file location; `~` is expanded, parents are created
        """
        self._path = Path(path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Ignoring unreadable storage file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Storage file {self._path} is not a JSON object, ignoring")
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
