"""Shared pytest fixtures for the apigen test suite.

Provides reusable fixtures for:
- Temporary target project directories and their Config
- In-memory schema / data store documents
- Pre-wired schema registry, instance store and scaffolder
"""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from apigen.config import Config
from apigen.scaffolder.generator import ResourceScaffolder
from apigen.scaffolder.templates import TemplateRenderer
from apigen.store.documents import MemoryDocument, SnapshotSlot
from apigen.store.instances import InstanceStore
from apigen.store.schema_registry import SchemaRegistry


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary target project root (auto-cleanup)."""
    project_dir = tmp_path / "test-api"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def config(tmp_project_dir: Path) -> Config:
    """Config pointing at the temporary project."""
    return Config(root=tmp_project_dir)


# ---------------------------------------------------------------------------
# In-memory documents
# ---------------------------------------------------------------------------

@pytest.fixture
def schema_doc() -> MemoryDocument:
    return MemoryDocument()


@pytest.fixture
def store_doc() -> MemoryDocument:
    return MemoryDocument()


@pytest.fixture
def backup_doc() -> MemoryDocument:
    return MemoryDocument()


@pytest.fixture
def registry(schema_doc: MemoryDocument, backup_doc: MemoryDocument) -> SchemaRegistry:
    """Schema registry over in-memory documents."""
    return SchemaRegistry(schema_doc, SnapshotSlot(backup_doc))


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: ``id-1``, ``id-2``, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def fixed_clock():
    return lambda: "2026-01-15T10:30:00Z"


@pytest.fixture
def instance_store(store_doc: MemoryDocument, sequential_ids, fixed_clock) -> InstanceStore:
    """Instance store over an in-memory document with predictable ids and times."""
    return InstanceStore(store_doc, id_factory=sequential_ids, clock=fixed_clock)


# ---------------------------------------------------------------------------
# Scaffolding
# ---------------------------------------------------------------------------

@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def scaffolder(config: Config, renderer: TemplateRenderer) -> ResourceScaffolder:
    """Scaffolder writing real files under the temporary project."""
    return ResourceScaffolder(config, renderer)


@pytest.fixture
def memory_scaffolder(
    config: Config,
    renderer: TemplateRenderer,
    registry: SchemaRegistry,
    instance_store: InstanceStore,
) -> ResourceScaffolder:
    """Scaffolder whose schema and data store live in memory.

    Artifacts are still written under the temporary project.
    """
    return ResourceScaffolder(config, renderer, registry=registry, instances=instance_store)
