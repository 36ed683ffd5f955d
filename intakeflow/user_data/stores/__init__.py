"""DataRecordStore implementations."""

from intakeflow.user_data.stores.inmemory import InMemoryDataRecordStore

__all__ = ["InMemoryDataRecordStore"]
