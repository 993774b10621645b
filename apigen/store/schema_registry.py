"""Per-resource field maps stored in the schema document.

The schema document maps a resource's plural name to ``{field: type}``.
Every field map carries ``id: string``.  Each mutating call re-reads the
document, applies its change and rewrites the whole document; a call that
changes nothing does not write at all.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from apigen.kv_args import FieldType, classify_value
from apigen.store.documents import JsonDocument, SnapshotSlot


class SchemaMode(str, Enum):
    """How :meth:`SchemaRegistry.define_or_extend` treats an existing resource."""

    CREATE_IF_ABSENT = "create-if-absent"
    FORCE_MERGE = "force-merge"
    RESET = "reset"


class SchemaAction(str, Enum):
    CREATED = "created"
    UNCHANGED = "unchanged"
    MERGED = "merged"
    RESET = "reset"


class SchemaChange(BaseModel):
    """Outcome of a schema registry call."""

    resource: str
    action: SchemaAction
    fields: dict[str, str] = Field(default_factory=dict)
    backed_up: bool = False

    @property
    def changed(self) -> bool:
        return self.action is not SchemaAction.UNCHANGED


class SchemaRegistry:
    """Reads and mutates resource field maps in the schema document.

    Args:
        document: Repository for ``data_schema.json``.
        backups: Single-slot store that receives a snapshot of the whole
            schema document before any destructive change.
    """

    def __init__(self, document: JsonDocument, backups: SnapshotSlot | None = None) -> None:
        self.document = document
        self.backups = backups

    async def get(self, plural: str) -> dict[str, str] | None:
        """Return the field map for *plural*, or ``None`` if undefined."""
        schema = await self.document.load()
        return schema.get(plural)

    async def resources(self) -> list[str]:
        schema = await self.document.load()
        return list(schema)

    async def ensure_from_fields(self, plural: str, values: dict[str, Any]) -> SchemaChange:
        """Infer a field map from example *values* unless one already exists.

        An existing field map is returned unchanged regardless of *values*.
        """
        schema = await self.document.load()
        existing = schema.get(plural)
        if existing is not None:
            return SchemaChange(resource=plural, action=SchemaAction.UNCHANGED, fields=existing)

        fields = {"id": FieldType.STRING.value}
        for key, value in values.items():
            if key == "id":
                continue
            fields[key] = classify_value(value).value
        schema[plural] = fields
        await self.document.save(schema)
        return SchemaChange(resource=plural, action=SchemaAction.CREATED, fields=fields)

    async def define_or_extend(
        self,
        plural: str,
        field_defs: dict[str, str],
        mode: SchemaMode = SchemaMode.CREATE_IF_ABSENT,
    ) -> SchemaChange:
        """Define *plural* from *field_defs*, or change an existing definition.

        Modes, for a resource that already has a field map:

        * ``create-if-absent`` -- no-op.
        * ``force-merge`` -- add new fields, overwrite re-declared types, never
          drop a field.
        * ``reset`` -- replace the field map with *field_defs*.

        Destructive modes snapshot the whole schema document first, but only
        when the resulting field map actually differs.
        """
        mode = SchemaMode(mode)
        new_fields = {**field_defs, "id": FieldType.STRING.value}
        schema = await self.document.load()
        existing = schema.get(plural)

        if existing is None:
            schema[plural] = _with_id_first(new_fields)
            await self.document.save(schema)
            return SchemaChange(resource=plural, action=SchemaAction.CREATED, fields=schema[plural])

        if mode is SchemaMode.CREATE_IF_ABSENT:
            return SchemaChange(resource=plural, action=SchemaAction.UNCHANGED, fields=existing)

        if mode is SchemaMode.RESET:
            target = _with_id_first(new_fields)
            action = SchemaAction.RESET
        else:
            target = {**existing, **new_fields}
            action = SchemaAction.MERGED

        if target == existing:
            return SchemaChange(resource=plural, action=SchemaAction.UNCHANGED, fields=existing)

        backed_up = False
        if self.backups is not None:
            await self.backups.capture(schema)
            backed_up = True
        schema[plural] = target
        await self.document.save(schema)
        return SchemaChange(resource=plural, action=action, fields=target, backed_up=backed_up)

    async def remove(self, plural: str) -> bool:
        """Drop the field map for *plural*.  Returns ``False`` if it was absent."""
        schema = await self.document.load()
        if plural not in schema:
            return False
        del schema[plural]
        await self.document.save(schema)
        return True


def _with_id_first(fields: dict[str, str]) -> dict[str, str]:
    return {"id": fields["id"], **{k: v for k, v in fields.items() if k != "id"}}
