# src/brokerdesk/services/mutation_dispatcher.py
"""
Mutation Dispatcher

One generic insert/update/delete path for all six collections.

Writes are non-optimistic: the remote call goes first and the local
collection changes only once it has succeeded. Failures are logged and
swallowed so callers (views) never see an exception; the action simply
does not happen. There is no retry.

Usage:
    dispatcher = MutationDispatcher(session_manager.current, store)

    task = await dispatcher.add_task({"title": "Call notary", "due_date": "2025-03-01"})
    await dispatcher.toggle_task_complete(task.id)
    await dispatcher.perform(MutationKind.DELETE, CollectionName.TASKS, task.id)
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from ..core.errors import MutationError
from ..core.models import AuthSession, CollectionName, Record, RecordId
from .collection_store import CollectionStore

logger = logging.getLogger(__name__)

MutationPayload = Union[Dict[str, Any], RecordId]
MutationOutcome = Union[Record, bool, None]


class MutationKind(str, Enum):
    """Supported remote write operations."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MutationDispatcher:
    """
    Generic remote write path with local reconciliation.

    Args:
        session_provider: Returns the active session or None; writes are
            dropped without one
        store: Collection store that owns the local records
        clock: Source of "now" for completion timestamps
    """

    def __init__(
        self,
        session_provider: Callable[[], Optional[AuthSession]],
        store: CollectionStore,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_provider = session_provider
        self._store = store
        self._clock = clock

    async def perform(
        self,
        kind: MutationKind,
        collection: CollectionName,
        payload: MutationPayload,
    ) -> MutationOutcome:
        """
        Run one write against `collection` and reconcile the local copy.

        Args:
            kind: insert, update or delete
            collection: Target collection
            payload: insert -> fields without id; update -> {"id": ..., **fields};
                delete -> the id (or {"id": ...})

        Returns:
            insert/update: the resulting local record (update returns None
            when the id is not held locally); delete: True. None whenever
            nothing was applied.
        """
        kind = MutationKind(kind)
        collection = CollectionName(collection)

        if self._session_provider() is None:
            logger.warning(f"Dropped {kind.value} on {collection.value}: no active session")
            return None

        if kind is MutationKind.INSERT:
            return await self._insert(collection, payload)
        if kind is MutationKind.UPDATE:
            return await self._update(collection, payload)
        return await self._delete(collection, payload)

    async def _insert(self, collection: CollectionName, payload: MutationPayload) -> Optional[Record]:
        if not isinstance(payload, dict):
            logger.error(f"Insert on {collection.value} needs a field mapping, got {type(payload).__name__}")
            return None
        data = {k: v for k, v in payload.items() if k != "id"}
        generation = self._store.generation

        try:
            record = await self._store.repository(collection).create(data)
        except Exception as e:
            logger.error(f"❌ {MutationError(MutationKind.INSERT.value, collection.value, e)}")
            return None

        if self._is_stale(generation, collection):
            return None
        self._store.prepend(collection, record)
        logger.debug(f"Inserted {collection.value} {record.id}")
        return record

    async def _update(self, collection: CollectionName, payload: MutationPayload) -> Optional[Record]:
        if not isinstance(payload, dict) or payload.get("id") is None:
            logger.error(f"Update on {collection.value} needs an 'id' in its payload")
            return None
        entity_id = payload["id"]
        updates = {k: v for k, v in payload.items() if k != "id"}
        generation = self._store.generation

        try:
            await self._store.repository(collection).update(entity_id, updates)
        except Exception as e:
            logger.error(f"❌ {MutationError(MutationKind.UPDATE.value, collection.value, e)}")
            return None

        if self._is_stale(generation, collection):
            return None
        try:
            return self._store.overlay(collection, entity_id, updates)
        except ValueError as e:
            # Remote accepted fields the local model rejects; keep the old copy.
            logger.error(f"❌ {MutationError(MutationKind.UPDATE.value, collection.value, e)}")
            return None

    async def _delete(self, collection: CollectionName, payload: MutationPayload) -> Optional[bool]:
        entity_id = payload.get("id") if isinstance(payload, dict) else payload
        if entity_id is None:
            logger.error(f"Delete on {collection.value} needs an id")
            return None
        generation = self._store.generation

        try:
            await self._store.repository(collection).delete(entity_id)
        except Exception as e:
            logger.error(f"❌ {MutationError(MutationKind.DELETE.value, collection.value, e)}")
            return None

        if self._is_stale(generation, collection):
            return None
        self._store.remove(collection, entity_id)
        return True

    def _is_stale(self, generation: int, collection: CollectionName) -> bool:
        if generation == self._store.generation:
            return False
        logger.info(f"Discarding {collection.value} write result: store was cleared meanwhile")
        return True

    # -------------------------
    # Composite
    # -------------------------

    async def toggle_task_complete(self, task_id: RecordId) -> Optional[Record]:
        """Flip `completed`; stamp `completed_at` when completing, clear it otherwise."""
        task = self._store.find(CollectionName.TASKS, task_id)
        if task is None:
            return None
        becoming_complete = not task.completed
        return await self.perform(
            MutationKind.UPDATE,
            CollectionName.TASKS,
            {
                "id": task_id,
                "completed": becoming_complete,
                "completed_at": self._clock() if becoming_complete else None,
            },
        )

    # -------------------------
    # Per-collection shortcuts
    # -------------------------

    async def add_lead(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.LEADS, data)

    async def update_lead(self, lead_id: RecordId, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.UPDATE, CollectionName.LEADS, {**data, "id": lead_id})

    async def delete_lead(self, lead_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.LEADS, lead_id)

    async def add_property(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.PROPERTIES, data)

    async def update_property(self, property_id: RecordId, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.UPDATE, CollectionName.PROPERTIES, {**data, "id": property_id})

    async def delete_property(self, property_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.PROPERTIES, property_id)

    async def add_task(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.TASKS, data)

    async def delete_task(self, task_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.TASKS, task_id)

    async def add_event(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.EVENTS, data)

    async def delete_event(self, event_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.EVENTS, event_id)

    async def add_transaction(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.TRANSACTIONS, data)

    async def delete_transaction(self, transaction_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.TRANSACTIONS, transaction_id)

    async def add_message(self, data: Dict[str, Any]) -> Optional[Record]:
        return await self.perform(MutationKind.INSERT, CollectionName.MESSAGES, data)

    async def mark_message_read(self, message_id: RecordId) -> Optional[Record]:
        return await self.perform(MutationKind.UPDATE, CollectionName.MESSAGES, {"id": message_id, "read": True})

    async def delete_message(self, message_id: RecordId) -> Optional[bool]:
        return await self.perform(MutationKind.DELETE, CollectionName.MESSAGES, message_id)
