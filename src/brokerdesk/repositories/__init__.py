# src/brokerdesk/repositories/__init__.py
"""
Repository Layer - Ports and Adapters Pattern

One generic remote repository per collection, so the six tables share a
single code path.

Usage:
    from brokerdesk.repositories import build_repositories

    repos = build_repositories(client)
    tasks = await repos[CollectionName.TASKS].list_recent()
"""

from .base import RemoteRepository
from .supabase_repository import SupabaseRecordRepository, build_repositories, to_wire

__all__ = [
    "RemoteRepository",
    "SupabaseRecordRepository",
    "build_repositories",
    "to_wire",
]
