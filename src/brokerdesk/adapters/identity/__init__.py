# src/brokerdesk/adapters/identity/__init__.py
"""Identity provider adapters."""

from .supabase import SupabaseIdentityProvider, session_from_supabase

__all__ = [
    "SupabaseIdentityProvider",
    "session_from_supabase",
]
