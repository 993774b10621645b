"""Instance records stored in the data store document.

The data store document maps a resource's plural name to an ordered list of
records.  Records are matched by exact ``id``; lookups that find nothing
return ``None`` / ``False`` and never write the document.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from apigen.kv_args import default_for_type
from apigen.store.documents import JsonDocument


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _new_id() -> str:
    return str(uuid.uuid4())


class InstanceStore:
    """CRUD over the records of every resource in one data store document.

    Args:
        document: Repository for ``data_store.json``.
        timestamps: Stamp ``created_at`` / ``updated_at`` on created records
            and refresh ``updated_at`` on updates of stamped records.
        id_factory: Callable returning a fresh unique identifier.
        clock: Callable returning the current time as an ISO 8601 string.
    """

    def __init__(
        self,
        document: JsonDocument,
        *,
        timestamps: bool = True,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self.document = document
        self.timestamps = timestamps
        self.id_factory = id_factory
        self.clock = clock

    # -- Create ------------------------------------------------------------

    async def create(
        self,
        plural: str,
        fields: dict[str, str],
        values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build a record for *plural* from its schema *fields* and append it.

        Supplied *values* win; every other schema field gets the empty value
        for its type.  Keys in *values* that the schema does not declare are
        ignored.
        """
        values = values or {}
        record: dict[str, Any] = {"id": self.id_factory()}
        if self.timestamps:
            now = self.clock()
            record["created_at"] = now
            record["updated_at"] = now

        for name, field_type in fields.items():
            if name == "id":
                continue
            record[name] = values[name] if name in values else default_for_type(field_type)

        data = await self.document.load()
        data.setdefault(plural, []).append(record)
        await self.document.save(data)
        return record

    # -- Read --------------------------------------------------------------

    async def list_all(self, plural: str) -> list[dict[str, Any]]:
        data = await self.document.load()
        return data.get(plural, [])

    async def get(self, plural: str, record_id: str) -> dict[str, Any] | None:
        for record in await self.list_all(plural):
            if record.get("id") == record_id:
                return record
        return None

    # -- Update ------------------------------------------------------------

    async def update(
        self, plural: str, record_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Shallow-merge *changes* over the record with *record_id*.

        The ``id`` of the record cannot be changed.  Returns the updated
        record, or ``None`` when the resource or record does not exist.
        """
        data = await self.document.load()
        records = data.get(plural)
        if not records:
            return None
        for index, record in enumerate(records):
            if record.get("id") != record_id:
                continue
            merged = {**record, **changes, "id": record_id}
            if self.timestamps and "updated_at" in record:
                merged["updated_at"] = self.clock()
            records[index] = merged
            await self.document.save(data)
            return merged
        return None

    # -- Delete ------------------------------------------------------------

    async def remove(self, plural: str, record_id: str) -> bool:
        """Delete the record with *record_id*.  Returns ``False`` if absent."""
        return await self._remove_where(plural, lambda r: r.get("id") == record_id) is not None

    async def remove_by_id_or_name(self, plural: str, key: str) -> str | None:
        """Delete the record whose ``id`` equals *key*, else whose ``name`` does.

        Returns the removed record's id, or ``None`` when nothing matched.
        """
        records = await self.list_all(plural)
        match = next((r for r in records if r.get("id") == key), None)
        if match is None:
            match = next((r for r in records if r.get("name") == key), None)
        if match is None:
            return None
        target_id = match.get("id")
        await self._remove_where(plural, lambda r: r.get("id") == target_id)
        return target_id

    async def drop_resource(self, plural: str) -> int:
        """Delete every record of *plural*.  Returns how many were removed."""
        data = await self.document.load()
        if plural not in data:
            return 0
        removed = len(data.pop(plural))
        await self.document.save(data)
        return removed

    async def _remove_where(
        self, plural: str, predicate: Callable[[dict[str, Any]], bool]
    ) -> dict[str, Any] | None:
        data = await self.document.load()
        records = data.get(plural)
        if not records:
            return None
        for index, record in enumerate(records):
            if predicate(record):
                del records[index]
                await self.document.save(data)
                return record
        return None
