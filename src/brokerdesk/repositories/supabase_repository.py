# src/brokerdesk/repositories/supabase_repository.py
"""
Supabase Record Repository

Implements RemoteRepository over Supabase's PostgREST API. A single generic
class is parameterized by record model and table name and instantiated once
per collection.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type

from pydantic_core import to_jsonable_python
from supabase import AsyncClient

from ..core.errors import RemoteError
from ..core.models import COLLECTION_MODELS, CollectionName, RecordId
from .base import RemoteRepository, T

logger = logging.getLogger(__name__)


def to_wire(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert datetimes, enums and models to JSON-compatible values."""
    return to_jsonable_python(data)


class SupabaseRecordRepository(RemoteRepository[T], Generic[T]):
    """
    Supabase implementation of RemoteRepository.

    Args:
        client: Async Supabase client
        table: Remote table name
        model: Record model rows are validated into
    """

    def __init__(self, client: AsyncClient, table: str, model: Type[T]):
        self._client = client
        self.table = table
        self.model = model

    def __repr__(self) -> str:
        return f"SupabaseRecordRepository(table={self.table!r}, model={self.model.__name__})"

    async def list_recent(self) -> Optional[List[T]]:
        result = await (
            self._client.table(self.table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        if result.data is None:
            logger.debug(f"No data returned for {self.table}")
            return None
        logger.debug(f"Fetched {len(result.data)} rows from {self.table}")
        return [self.parse(row) for row in result.data]

    async def create(self, data: Dict[str, Any]) -> T:
        clean_data = {k: v for k, v in data.items() if k != "id"}
        result = await self._client.table(self.table).insert(to_wire(clean_data)).execute()
        if not result.data:
            raise RemoteError(f"Insert into {self.table} returned no row")
        return self.parse(result.data[0])

    async def update(self, entity_id: RecordId, data: Dict[str, Any]) -> None:
        clean_data = {k: v for k, v in data.items() if k != "id"}
        await self._client.table(self.table).update(to_wire(clean_data)).eq("id", entity_id).execute()

    async def delete(self, entity_id: RecordId) -> None:
        await self._client.table(self.table).delete().eq("id", entity_id).execute()


def build_repositories(client: AsyncClient) -> Dict[CollectionName, RemoteRepository]:
    """Instantiate one repository per collection."""
    return {
        name: SupabaseRecordRepository(client, name.value, model)
        for name, model in COLLECTION_MODELS.items()
    }
