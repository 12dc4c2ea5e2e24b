# src/brokerdesk/repositories/base.py
"""
Base Repository - Abstract Interface (Port)

Defines the contract every remote collection implementation must follow.
This is the "port" in ports and adapters terminology; one repository is
instantiated per table.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from ..core.models import Record, RecordId

T = TypeVar("T", bound=Record)


class RemoteRepository(ABC, Generic[T]):
    """
    Abstract remote collection for one record type.

    Methods raise on failure; callers decide whether to log or surface.
    """

    table: str
    model: Type[T]

    @abstractmethod
    async def list_recent(self) -> Optional[List[T]]:
        """
        List every record, newest first by creation time.

        Returns:
            Records in the remote's created_at descending order, or None
            when the remote answered without data
        """
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> T:
        """
        Create a record.

        Args:
            data: Record fields without an identifier

        Returns:
            The canonical record with its assigned id and server defaults
        """
        pass

    @abstractmethod
    async def update(self, entity_id: RecordId, data: Dict[str, Any]) -> None:
        """
        Apply a partial update to one record.

        Args:
            entity_id: The record to update
            data: Fields to overwrite
        """
        pass

    @abstractmethod
    async def delete(self, entity_id: RecordId) -> None:
        """
        Delete a record by id. Deleting a missing id is not an error.

        Args:
            entity_id: The record to delete
        """
        pass

    def parse(self, row: Dict[str, Any]) -> T:
        """Validate a remote row into the repository's model."""
        return self.model.model_validate(row)
