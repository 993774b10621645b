"""Flat-file JSON persistence: documents, schema registry and instances."""

from apigen.store.documents import FileDocument, JsonDocument, MemoryDocument, SnapshotSlot
from apigen.store.instances import InstanceStore
from apigen.store.schema_registry import SchemaAction, SchemaChange, SchemaMode, SchemaRegistry

__all__ = [
    "FileDocument",
    "InstanceStore",
    "JsonDocument",
    "MemoryDocument",
    "SchemaAction",
    "SchemaChange",
    "SchemaMode",
    "SchemaRegistry",
    "SnapshotSlot",
]
