# src/brokerdesk/adapters/storage/memory.py
"""In-memory key/value storage, used in tests and for throwaway sessions."""

from typing import Dict, Optional


class InMemoryStorage:
    """Dict-backed implementation of KeyValueStorageProtocol."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self.writes += 1

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
