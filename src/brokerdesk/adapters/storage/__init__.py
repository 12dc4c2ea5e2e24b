# src/brokerdesk/adapters/storage/__init__.py
"""
Storage adapters package.

Concrete implementations of KeyValueStorageProtocol:
- Local: JSON file on disk
- Memory: dict, for tests
"""

from .local import JsonFileStorage
from .memory import InMemoryStorage

__all__ = [
    "JsonFileStorage",
    "InMemoryStorage",
]
