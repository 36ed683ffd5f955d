"""DataRecordStore abstract interface."""

from abc import ABC, abstractmethod

from intakeflow.user_data.enums import ValueKind
from intakeflow.user_data.models import DataRecord


class DataRecordStore(ABC):
    """Abstract interface for user data record storage.

    Records are unique per (owner_id, scope_id, key). Implementations raise
    the StoreError hierarchy from `intakeflow.user_data.errors`.
    """

    @abstractmethod
    async def get_records(self, owner_id: str) -> list[DataRecord]:
        """Get every record of an owner across all scopes.

        Records come back in insertion order; updating a record keeps its
        original position.
        """
        pass

    @abstractmethod
    async def upsert_record(
        self,
        owner_id: str,
        scope_id: str,
        key: str,
        value: str | None,
        kind: ValueKind,
    ) -> DataRecord:
        """Create or replace the record for (owner_id, scope_id, key)."""
        pass
