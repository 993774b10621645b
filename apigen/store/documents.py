"""JSON document repositories.

Both persisted documents (the schema document and the data store document)
are whole-file JSON objects.  Components never hold them in memory between
operations: each operation loads, mutates and saves the full document through
one of the repositories below, which keeps them testable without a
filesystem.
"""

from __future__ import annotations

import asyncio
import copy
import json
from pathlib import Path
from typing import Any, Protocol

from apigen.errors import DocumentError


class JsonDocument(Protocol):
    """A single JSON object that can be loaded and saved as a whole."""

    async def load(self) -> dict[str, Any]: ...

    async def save(self, data: dict[str, Any]) -> None: ...


# ---------------------------------------------------------------------------
# File-backed document
# ---------------------------------------------------------------------------


class FileDocument:
    """A JSON object persisted at *path*.

    A missing or whitespace-only file loads as an empty mapping.  Malformed
    JSON raises :class:`DocumentError`.  Writes are plain overwrites: no
    temp-file rename and no fsync.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileDocument({str(self.path)!r})"

    async def load(self) -> dict[str, Any]:
        return await asyncio.to_thread(_read_document, self.path)

    async def save(self, data: dict[str, Any]) -> None:
        await asyncio.to_thread(_write_document, self.path, data)


# ---------------------------------------------------------------------------
# In-memory document
# ---------------------------------------------------------------------------


class MemoryDocument:
    """In-memory stand-in for :class:`FileDocument`.

    Stores a deep copy on every save and hands out a deep copy on every load,
    so callers cannot mutate the stored state behind the repository's back.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}
        self.saves = 0

    @property
    def data(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    async def load(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    async def save(self, data: dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)
        self.saves += 1


# ---------------------------------------------------------------------------
# Single-slot snapshot store
# ---------------------------------------------------------------------------


class SnapshotSlot:
    """Holds at most one snapshot of a document.

    Every :meth:`capture` unconditionally replaces the previous snapshot, so
    only the most recent destructive change can be rolled back.
    """

    def __init__(self, document: JsonDocument) -> None:
        self.document = document

    async def capture(self, data: dict[str, Any]) -> None:
        """Overwrite the slot with *data*."""
        await self.document.save(data)

    async def read(self) -> dict[str, Any] | None:
        """Return the stored snapshot, or ``None`` when the slot is empty."""
        data = await self.document.load()
        return data or None

    async def restore_into(self, target: JsonDocument) -> bool:
        """Write the stored snapshot over *target*.

        Returns ``False`` (and leaves *target* untouched) when the slot is
        empty.
        """
        snapshot = await self.read()
        if snapshot is None:
            return False
        await target.save(snapshot)
        return True


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_document(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except UnicodeDecodeError as exc:
        raise DocumentError(path, str(exc)) from exc
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DocumentError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise DocumentError(path, f"expected a JSON object, got {type(data).__name__}")
    return data


def _write_document(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
