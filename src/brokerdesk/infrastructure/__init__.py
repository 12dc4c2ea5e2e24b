# src/brokerdesk/infrastructure/__init__.py
"""
Infrastructure Layer

Remote client construction and process-wide logging setup.
"""

from .log_config import setup_logging
from .supabase_client import get_supabase_client, reset_supabase_client

__all__ = [
    "setup_logging",
    "get_supabase_client",
    "reset_supabase_client",
]
