"""apigen configuration.

Centralised, typed configuration for the scaffolder.  The model only carries
the target project's layout; the derived paths below are where every
component reads and writes.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from apigen.store.documents import FileDocument, SnapshotSlot

_FALSE_VALUES = {"0", "false", "no", "off"}


class Config(BaseModel):
    """Layout of the target project that apigen scaffolds into.

    Instances are typically created once by the CLI entry point and then
    passed to the scaffolder, schema registry and instance store.
    """

    root: Path = Field(default=Path("."), description="Target project root")
    src_dir: str = Field(default="src")
    schema_file: str = Field(default="data_schema.json")
    store_file: str = Field(default="data_store.json")
    backup_file: str = Field(default="schemaBackup.json")
    timestamps: bool = Field(
        default=True, description="Stamp created_at/updated_at on new instances"
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def src_path(self) -> Path:
        return self.root / self.src_dir

    @property
    def models_dir(self) -> Path:
        return self.src_path / "models"

    @property
    def controllers_dir(self) -> Path:
        return self.src_path / "controllers"

    @property
    def routes_dir(self) -> Path:
        return self.src_path / "routes"

    @property
    def services_dir(self) -> Path:
        return self.src_path / "services"

    @property
    def data_dir(self) -> Path:
        return self.src_path / "data"

    @property
    def backups_dir(self) -> Path:
        return self.src_path / "backups"

    @property
    def schema_path(self) -> Path:
        """Path to the schema document (``data_schema.json``)."""
        return self.data_dir / self.schema_file

    @property
    def store_path(self) -> Path:
        """Path to the data store document (``data_store.json``)."""
        return self.data_dir / self.store_file

    @property
    def backup_path(self) -> Path:
        """Single-slot schema backup written before destructive changes."""
        return self.backups_dir / self.backup_file

    @property
    def server_path(self) -> Path:
        return self.src_path / "server.js"

    @property
    def server_backup_path(self) -> Path:
        return self.src_path / "server.backup.js"

    # ------------------------------------------------------------------
    # Document factories
    # ------------------------------------------------------------------

    def schema_document(self) -> FileDocument:
        return FileDocument(self.schema_path)

    def store_document(self) -> FileDocument:
        return FileDocument(self.store_path)

    def backup_slot(self) -> SnapshotSlot:
        return SnapshotSlot(FileDocument(self.backup_path))

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APIGEN_ROOT, APIGEN_SRC_DIR, APIGEN_TIMESTAMPS.
        """
        timestamps = os.environ.get("APIGEN_TIMESTAMPS", "1").strip().lower()
        return cls(
            root=Path(os.environ.get("APIGEN_ROOT", ".")),
            src_dir=os.environ.get("APIGEN_SRC_DIR", "src"),
            timestamps=timestamps not in _FALSE_VALUES,
        )
