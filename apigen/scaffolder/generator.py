"""Idempotent resource scaffolding.

Given a resource name and its field declarations, ensures that a model, a
controller and a route module exist for it and that the schema document
describes it.  Existing artifacts are skipped unless ``force`` is set, so
re-running the same command converges instead of duplicating work.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from apigen.config import Config
from apigen.errors import InvalidArgumentError
from apigen.kv_args import parse_field_defs
from apigen.store.instances import InstanceStore
from apigen.store.schema_registry import SchemaChange, SchemaMode, SchemaRegistry
from apigen.utils import capitalize, pluralize, singularize

from .templates import TemplateRenderer, write_text


DEFAULT_PORT = 3000


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ArtifactKind(str, Enum):
    MODEL = "model"
    CONTROLLER = "controller"
    ROUTE = "route"


ALL_ARTIFACTS: tuple[ArtifactKind, ...] = (
    ArtifactKind.MODEL,
    ArtifactKind.CONTROLLER,
    ArtifactKind.ROUTE,
)

_TEMPLATES: dict[ArtifactKind, str] = {
    ArtifactKind.MODEL: "model.js.j2",
    ArtifactKind.CONTROLLER: "controller.js.j2",
    ArtifactKind.ROUTE: "route.js.j2",
}


class ArtifactStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"


class ResourceNames(BaseModel):
    """Singular and plural spelling of a resource, from the trailing-``s`` rule."""

    singular: str
    plural: str

    @classmethod
    def from_arg(cls, name: str) -> "ResourceNames":
        """Derive both spellings from a name given either way round.

        Raises:
            InvalidArgumentError: If *name* is empty after stripping.
        """
        name = name.strip()
        if not name or name == "s":
            raise InvalidArgumentError(f"Invalid resource name: {name!r}")
        return cls(singular=singularize(name), plural=pluralize(name))

    @property
    def singular_cap(self) -> str:
        return capitalize(self.singular)

    @property
    def plural_cap(self) -> str:
        return capitalize(self.plural)


class ArtifactResult(BaseModel):
    kind: ArtifactKind
    path: Path
    status: ArtifactStatus


class ScaffoldReport(BaseModel):
    """Everything a single :meth:`ResourceScaffolder.scaffold` call did."""

    names: ResourceNames
    schema_change: SchemaChange | None = None
    artifacts: list[ArtifactResult] = Field(default_factory=list)

    @property
    def written(self) -> list[ArtifactResult]:
        return [a for a in self.artifacts if a.status is not ArtifactStatus.SKIPPED]


class TeardownReport(BaseModel):
    names: ResourceNames
    deleted: list[Path] = Field(default_factory=list)
    schema_removed: bool = False
    instances_removed: int = 0


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def parse_artifact_kind(value: str | ArtifactKind | None) -> tuple[ArtifactKind, ...]:
    """Map an ``--only`` selector to the artifact kinds to generate.

    ``None`` selects all three kinds.

    Raises:
        InvalidArgumentError: On an unknown selector.
    """
    if value is None:
        return ALL_ARTIFACTS
    try:
        return (ArtifactKind(value),)
    except ValueError:
        allowed = ", ".join(k.value for k in ArtifactKind)
        raise InvalidArgumentError(
            f"Unknown artifact kind {value!r} (expected one of: {allowed})"
        ) from None


def artifact_path(config: Config, names: ResourceNames, kind: ArtifactKind) -> Path:
    """Canonical location of an artifact inside the target project."""
    if kind is ArtifactKind.MODEL:
        return config.models_dir / f"{names.singular}.js"
    if kind is ArtifactKind.CONTROLLER:
        return config.controllers_dir / f"{names.plural}Controller.js"
    return config.routes_dir / f"{names.plural}.js"


def build_context(names: ResourceNames, fields: dict[str, str]) -> dict[str, Any]:
    """Build the Jinja2 template context for one resource."""
    return {
        "singular": names.singular,
        "plural": names.plural,
        "singular_cap": names.singular_cap,
        "plural_cap": names.plural_cap,
        "fields": fields,
        "instance_fields": [name for name in fields if name != "id"],
    }


def render_artifact(
    renderer: TemplateRenderer,
    names: ResourceNames,
    fields: dict[str, str],
    kind: ArtifactKind,
) -> str:
    """Render the source text of one artifact.  Touches no files."""
    return renderer.render(_TEMPLATES[kind], build_context(names, fields))


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


class ResourceScaffolder:
    """Scaffolding orchestrator for one target project.

    The schema registry and instance store default to the file-backed
    documents described by *config*; tests inject in-memory ones.
    """

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer | None = None,
        registry: SchemaRegistry | None = None,
        instances: InstanceStore | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.registry = registry or SchemaRegistry(
            config.schema_document(), config.backup_slot()
        )
        self.instances = instances or InstanceStore(
            config.store_document(), timestamps=config.timestamps
        )

    # -- Public API --------------------------------------------------------

    async def scaffold(
        self,
        name: str,
        field_defs: Iterable[str] | None = None,
        *,
        only: str | ArtifactKind | None = None,
        force: bool = False,
        reset: bool = False,
    ) -> ScaffoldReport:
        """Define or extend a resource's schema and generate its artifacts.

        Args:
            name: Resource name, singular or plural.
            field_defs: ``name:type`` declarations.  Defaults to
                ``id:string name:string``.
            only: Restrict generation to one artifact kind.
            force: Merge the declared fields into an existing schema and
                regenerate existing artifacts.
            reset: Replace an existing schema with the declared fields.

        An existing schema is only merged or reset when the model is among
        the generated kinds; otherwise it is read as it stands.

        Returns:
            A report listing the schema change and each artifact's status.
        """
        names = ResourceNames.from_arg(name)
        fields = parse_field_defs(field_defs)
        kinds = parse_artifact_kind(only)

        # The schema only changes alongside the model it describes.
        if ArtifactKind.MODEL not in kinds:
            mode = SchemaMode.CREATE_IF_ABSENT
        elif reset:
            mode = SchemaMode.RESET
        elif force:
            mode = SchemaMode.FORCE_MERGE
        else:
            mode = SchemaMode.CREATE_IF_ABSENT

        change = await self.registry.define_or_extend(names.plural, fields, mode)
        artifacts = await self.generate_artifacts(names, change.fields, kinds=kinds, force=force)
        return ScaffoldReport(names=names, schema_change=change, artifacts=artifacts)

    async def scaffold_from_values(self, name: str, values: dict[str, Any]) -> ScaffoldReport:
        """Infer the schema from example *values* (if absent) and fill in artifacts."""
        names = ResourceNames.from_arg(name)
        change = await self.registry.ensure_from_fields(names.plural, values)
        artifacts = await self.generate_artifacts(names, change.fields)
        return ScaffoldReport(names=names, schema_change=change, artifacts=artifacts)

    async def generate_artifacts(
        self,
        names: ResourceNames,
        fields: dict[str, str],
        *,
        kinds: Iterable[ArtifactKind] = ALL_ARTIFACTS,
        force: bool = False,
    ) -> list[ArtifactResult]:
        """Write each artifact kind in *kinds* that is missing (or all if *force*).

        Kinds are handled independently, so a partial earlier run is
        completed rather than treated as an error.
        """
        results: list[ArtifactResult] = []
        for kind in kinds:
            path = artifact_path(self.config, names, kind)
            exists = await asyncio.to_thread(path.exists)
            if exists and not force:
                results.append(ArtifactResult(kind=kind, path=path, status=ArtifactStatus.SKIPPED))
                continue
            content = render_artifact(self.renderer, names, fields, kind)
            await write_text(path, content)
            status = ArtifactStatus.OVERWRITTEN if exists else ArtifactStatus.CREATED
            results.append(ArtifactResult(kind=kind, path=path, status=status))
        return results

    # -- Support files -----------------------------------------------------

    async def ensure_data_service(self) -> Path | None:
        """Write ``services/dataService.js`` if missing.  Returns the path if written."""
        path = self.config.services_dir / "dataService.js"
        return await self._render_if_missing(
            "dataService.js.j2", path, {"store_file": self.config.store_file}
        )

    async def ensure_server(self, port: int = DEFAULT_PORT) -> Path | None:
        """Write ``server.js`` if missing.  Returns the path if written."""
        return await self._render_if_missing(
            "server.js.j2",
            self.config.server_path,
            {"store_file": self.config.store_file, "port": port},
        )

    # -- Teardown ----------------------------------------------------------

    async def teardown(self, name: str) -> TeardownReport:
        """Delete a resource's artifacts, schema entry and every instance."""
        names = ResourceNames.from_arg(name)
        report = TeardownReport(names=names)
        for kind in ALL_ARTIFACTS:
            path = artifact_path(self.config, names, kind)
            if await asyncio.to_thread(_unlink_if_exists, path):
                report.deleted.append(path)
        report.schema_removed = await self.registry.remove(names.plural)
        report.instances_removed = await self.instances.drop_resource(names.plural)
        return report

    # -- Internal ----------------------------------------------------------

    async def _render_if_missing(
        self, template_path: str, path: Path, context: dict[str, Any]
    ) -> Path | None:
        if await asyncio.to_thread(path.exists):
            return None
        return await self.renderer.render_to_file(template_path, path, context)


def _unlink_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
