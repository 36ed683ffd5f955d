"""In-memory implementation of DataRecordStore."""

from intakeflow.user_data.enums import ValueKind
from intakeflow.user_data.errors import ValidationError
from intakeflow.user_data.models import DataRecord
from intakeflow.user_data.store import DataRecordStore


class InMemoryDataRecordStore(DataRecordStore):
    """In-memory implementation of DataRecordStore for testing and development."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        # Dict assignment to an existing key keeps its position
        self._records: dict[str, dict[tuple[str, str], DataRecord]] = {}

    async def get_records(self, owner_id: str) -> list[DataRecord]:
        """Get every record of an owner in insertion order."""
        return list(self._records.get(owner_id, {}).values())

    async def upsert_record(
        self,
        owner_id: str,
        scope_id: str,
        key: str,
        value: str | None,
        kind: ValueKind,
    ) -> DataRecord:
        """Create or replace the record for (owner_id, scope_id, key)."""
        if not owner_id:
            raise ValidationError("owner_id must not be empty")
        if not key:
            raise ValidationError("key must not be empty")

        record = DataRecord(
            owner_id=owner_id,
            scope_id=scope_id,
            key=key,
            value=value,
            value_kind=kind,
        )
        self._records.setdefault(owner_id, {})[(scope_id, key)] = record
        return record

    def clear(self) -> None:
        """Drop all records."""
        self._records.clear()
