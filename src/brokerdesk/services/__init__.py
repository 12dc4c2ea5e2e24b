# src/brokerdesk/services/__init__.py
"""
Services Layer

Session, collection, mutation and preferences logic for the dashboard.
"""

from .aggregates import BadgeCounts, FinanceSummary, badge_counts, finance_summary
from .collection_store import CollectionStore
from .mutation_dispatcher import MutationDispatcher, MutationKind
from .preferences_store import PreferencesStore
from .session_manager import SessionManager

__all__ = [
    "BadgeCounts",
    "FinanceSummary",
    "badge_counts",
    "finance_summary",
    "CollectionStore",
    "MutationDispatcher",
    "MutationKind",
    "PreferencesStore",
    "SessionManager",
]
