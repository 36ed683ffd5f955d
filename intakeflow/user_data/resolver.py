"""Layered resolution of user data.

An owner's answers are recorded per scope (one scope per questionnaire or
flow). Resolving for a scope merges everything the owner ever answered,
letting values recorded in the current scope win:

    other scopes, in insertion order  ->  current scope, in insertion order

Aliases are applied at write time, so the resolved view already carries
every alias of a written key.
"""

import asyncio
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from intakeflow.config.settings import Settings
from intakeflow.observability.logging import get_logger
from intakeflow.user_data.aliases import AliasTable
from intakeflow.user_data.models import decode_record, encode_value, infer_kind
from intakeflow.user_data.repairs import DEFAULT_REPAIRS, ReadTimeRepair
from intakeflow.user_data.store import DataRecordStore

logger = get_logger(__name__)


class LayeredDataResolver:
    """Write and resolve user data through a DataRecordStore.

    Writes of one owner are serialised so that mirrored alias writes are
    never interleaved with another write of the same owner. Store errors
    propagate unchanged.
    """

    def __init__(
        self,
        store: DataRecordStore,
        aliases: AliasTable | None = None,
        repairs: Sequence[ReadTimeRepair] | None = None,
    ) -> None:
        self._store = store
        self._aliases = aliases or AliasTable.default()
        self._repairs = tuple(DEFAULT_REPAIRS if repairs is None else repairs)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def aliases(self) -> AliasTable:
        return self._aliases

    @asynccontextmanager
    async def _owner_lock(self, owner_id: str) -> AsyncIterator[None]:
        """Hold the owner's write lock; the lock is dropped once unused."""
        lock = self._locks.get(owner_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[owner_id] = lock
        self._lock_users[owner_id] = self._lock_users.get(owner_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[owner_id] - 1
            if remaining:
                self._lock_users[owner_id] = remaining
            else:
                del self._lock_users[owner_id]
                del self._locks[owner_id]

    async def write(self, owner_id: str, scope_id: str, key: str, value: Any) -> list[str]:
        """Record a value under its key and every alias of the key.

        Args:
            owner_id: Owning user
            scope_id: Scope the value was collected in
            key: Field key
            value: Python value; its kind is inferred

        Returns:
            Keys written, the given key first
        """
        kind = infer_kind(value)
        encoded = encode_value(value, kind)
        keys = [key, *self._aliases.aliases_of(key)]

        async with self._owner_lock(owner_id):
            for name in keys:
                await self._store.upsert_record(owner_id, scope_id, name, encoded, kind)

        logger.debug(
            "user_data_written",
            owner_id=owner_id,
            scope_id=scope_id,
            key=key,
            kind=kind.value,
            mirrored_keys=keys[1:],
        )
        return keys

    async def write_many(
        self, owner_id: str, scope_id: str, data: Mapping[str, Any]
    ) -> list[str]:
        """Write several values in order; returns every key written."""
        written: list[str] = []
        for key, value in data.items():
            for name in await self.write(owner_id, scope_id, key, value):
                if name not in written:
                    written.append(name)
        return written

    async def resolve(self, owner_id: str | None, scope_id: str | None) -> dict[str, Any]:
        """Build the resolved view of an owner for the current scope.

        Args:
            owner_id: Owning user; empty or None yields an empty view
            scope_id: Current scope, whose values win

        Returns:
            Flat mapping of field key to decoded value
        """
        if not owner_id:
            return {}

        records = await self._store.get_records(owner_id)

        other_scopes: dict[str, Any] = {}
        current_scope: dict[str, Any] = {}
        for record in records:
            layer = current_scope if record.scope_id == scope_id else other_scopes
            layer[record.key] = decode_record(record)

        view = {**other_scopes, **current_scope}
        for repair in self._repairs:
            view = repair(view)

        logger.debug(
            "user_data_resolved",
            owner_id=owner_id,
            scope_id=scope_id,
            record_count=len(records),
            key_count=len(view),
        )
        return view


def build_resolver(store: DataRecordStore, settings: Settings | None = None) -> LayeredDataResolver:
    """Wire a resolver from the `user_data` settings section.

    Raises:
        AliasTableError: If the configured alias groups are invalid
    """
    if settings is None:
        from intakeflow.config import get_settings

        settings = get_settings()

    config = settings.user_data
    aliases = (
        AliasTable.from_groups(config.aliases)
        if config.aliases is not None
        else AliasTable.default()
    )
    repairs = DEFAULT_REPAIRS if config.read_time_repairs else ()
    return LayeredDataResolver(store, aliases=aliases, repairs=repairs)
