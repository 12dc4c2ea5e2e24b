# src/brokerdesk/infrastructure/supabase_client.py
"""
Supabase Client

Provides the async Supabase client shared by the identity adapter and the
six collection repositories.

Usage:
    from .supabase_client import get_supabase_client

    client = await get_supabase_client(config)
    result = await client.table("tasks").select("*").execute()
"""

import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from ..config import BrokerDeskConfig
from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Singleton client
_supabase_client: Optional[AsyncClient] = None


async def get_supabase_client(config: BrokerDeskConfig) -> AsyncClient:
    """
    Get the Supabase client singleton.

    Args:
        config: Configuration holding the project URL and anon key

    Returns:
        Async Supabase client

    Raises:
        ConfigurationError: URL or key missing
    """
    global _supabase_client

    if _supabase_client is not None:
        return _supabase_client

    if not config.has_supabase:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")

    _supabase_client = await acreate_client(config.supabase_url, config.supabase_key)
    logger.info(f"✅ Connected to Supabase: {config.supabase_url}")
    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client (tests, credential changes)."""
    global _supabase_client
    _supabase_client = None
