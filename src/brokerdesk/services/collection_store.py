# src/brokerdesk/services/collection_store.py
"""
Collection Store

Owns the six in-memory collections and their bulk hydration.

The remote is the source of truth. Lists here only change after a remote
call settles: hydration replaces a whole list, the mutation dispatcher
prepends/overlays/removes single records, sign-out clears everything.

Usage:
    store = CollectionStore(build_repositories(client))
    await store.hydrate_all()
    store.tasks[0].title
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..core.errors import HydrationError
from ..core.models import (
    CalendarEvent,
    CollectionName,
    Lead,
    Message,
    Property,
    Record,
    RecordId,
    Task,
    Transaction,
)
from ..repositories.base import RemoteRepository

logger = logging.getLogger(__name__)

HydrationResult = Dict[CollectionName, Optional[HydrationError]]


class CollectionStore:
    """
    Six independently typed, identically shaped record lists.

    Args:
        repositories: One remote repository per collection
    """

    def __init__(self, repositories: Mapping[CollectionName, RemoteRepository]):
        missing = [name.value for name in CollectionName if name not in repositories]
        if missing:
            raise ValueError(f"Missing repositories for: {', '.join(missing)}")

        self._repositories: Dict[CollectionName, RemoteRepository] = dict(repositories)
        self._collections: Dict[CollectionName, List[Record]] = {name: [] for name in CollectionName}
        self._in_flight = 0
        self._generation = 0
        self._listeners: List[Callable[[CollectionName], Any]] = []

    # -------------------------
    # Read access
    # -------------------------

    @property
    def loading(self) -> bool:
        """True while any hydration has requests that have not settled."""
        return self._in_flight > 0

    @property
    def generation(self) -> int:
        """Bumped by clear_all(); results from older generations are stale."""
        return self._generation

    def repository(self, name: CollectionName) -> RemoteRepository:
        return self._repositories[CollectionName(name)]

    def get(self, name: CollectionName) -> List[Record]:
        """Snapshot of one collection, in display order."""
        return list(self._collections[CollectionName(name)])

    def find(self, name: CollectionName, entity_id: RecordId) -> Optional[Record]:
        for record in self._collections[CollectionName(name)]:
            if record.id == entity_id:
                return record
        return None

    def __len__(self) -> int:
        return sum(len(items) for items in self._collections.values())

    @property
    def leads(self) -> List[Lead]:
        return self.get(CollectionName.LEADS)

    @property
    def messages(self) -> List[Message]:
        return self.get(CollectionName.MESSAGES)

    @property
    def properties(self) -> List[Property]:
        return self.get(CollectionName.PROPERTIES)

    @property
    def tasks(self) -> List[Task]:
        return self.get(CollectionName.TASKS)

    @property
    def events(self) -> List[CalendarEvent]:
        return self.get(CollectionName.EVENTS)

    @property
    def transactions(self) -> List[Transaction]:
        return self.get(CollectionName.TRANSACTIONS)

    def subscribe(self, listener: Callable[[CollectionName], Any]) -> Callable[[], None]:
        """Call `listener(name)` after any change to a collection."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, name: CollectionName) -> None:
        for listener in list(self._listeners):
            try:
                listener(name)
            except Exception as e:
                logger.error(f"Collection listener failed for {name.value}: {e}")

    # -------------------------
    # Hydration
    # -------------------------

    async def hydrate_all(self, generation: Optional[int] = None) -> HydrationResult:
        """
        Fetch all six collections concurrently.

        Each request succeeds or fails on its own: a failure is logged and
        leaves that collection as it was. Overlapping calls are not merged;
        whichever response lands last wins for each collection.

        Args:
            generation: Generation observed when the hydration was requested;
                defaults to the current one

        Returns:
            Collection name -> HydrationError, or None on success
        """
        if generation is None:
            generation = self._generation
        if generation != self._generation:
            logger.info("Skipping hydration requested before the store was cleared")
            return {name: None for name in CollectionName}

        self._in_flight += 1
        logger.info("Hydrating collections...")
        try:
            outcomes = await asyncio.gather(
                *(self._hydrate_one(name, generation) for name in CollectionName)
            )
        finally:
            self._in_flight -= 1

        result: HydrationResult = dict(zip(CollectionName, outcomes))
        failed = [name.value for name, error in result.items() if error is not None]
        if failed:
            logger.warning(f"⚠️ Hydration finished with failures: {', '.join(failed)}")
        else:
            logger.info(f"✅ Hydrated {len(self)} records across {len(result)} collections")
        return result

    async def _hydrate_one(self, name: CollectionName, generation: int) -> Optional[HydrationError]:
        try:
            records = await self._repositories[name].list_recent()
        except Exception as e:
            error = HydrationError(name.value, e)
            logger.error(f"❌ {error}")
            return error

        if generation != self._generation:
            logger.info(f"Discarding stale {name.value} hydration (store was cleared)")
            return None
        if records is None:
            return None
        self.replace(name, records)
        return None

    # -------------------------
    # Local writes (after remote confirmation only)
    # -------------------------

    def replace(self, name: CollectionName, records: List[Record]) -> None:
        name = CollectionName(name)
        self._collections[name] = list(records)
        self._notify(name)

    def prepend(self, name: CollectionName, record: Record) -> None:
        name = CollectionName(name)
        self._collections[name] = [record, *self._collections[name]]
        self._notify(name)

    def overlay(self, name: CollectionName, entity_id: RecordId, fields: Dict[str, Any]) -> Optional[Record]:
        """
        Shallow-merge `fields` onto the record with `entity_id`.

        Returns:
            The merged record, or None when the id is not present
        """
        name = CollectionName(name)
        items = self._collections[name]
        for index, record in enumerate(items):
            if record.id == entity_id:
                merged = type(record).model_validate({**record.model_dump(), **fields})
                self._collections[name] = [*items[:index], merged, *items[index + 1:]]
                self._notify(name)
                return merged
        return None

    def remove(self, name: CollectionName, entity_id: RecordId) -> bool:
        name = CollectionName(name)
        items = self._collections[name]
        remaining = [record for record in items if record.id != entity_id]
        if len(remaining) == len(items):
            return False
        self._collections[name] = remaining
        self._notify(name)
        return True

    def clear_all(self) -> None:
        """Empty all six collections and invalidate in-flight hydrations."""
        self._generation += 1
        for name in CollectionName:
            self._collections[name] = []
            self._notify(name)
        logger.info("Cleared all collections")
