"""Tests for the resource scaffolder (apigen.scaffolder.generator).

Covers:
- ResourceNames derivation
- Artifact paths and the --only selector
- Idempotent scaffolding (skip / force / partial completion)
- Schema modes wired through scaffold()
- Scaffolding from example values
- Support files (data service, server) and teardown
"""

from __future__ import annotations

from pathlib import Path

import pytest

from apigen.config import Config
from apigen.errors import InvalidArgumentError
from apigen.scaffolder.generator import (
    ALL_ARTIFACTS,
    ArtifactKind,
    ArtifactStatus,
    ResourceNames,
    ResourceScaffolder,
    artifact_path,
    build_context,
    parse_artifact_kind,
)
from apigen.store.documents import MemoryDocument
from apigen.store.schema_registry import SchemaAction


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


# ---------------------------------------------------------------------------
# ResourceNames
# ---------------------------------------------------------------------------


class TestResourceNames:
    @pytest.mark.parametrize(
        "arg,singular,plural",
        [
            ("widget", "widget", "widgets"),
            ("widgets", "widget", "widgets"),
            ("  book ", "book", "books"),
        ],
    )
    def test_from_arg(self, arg: str, singular: str, plural: str):
        names = ResourceNames.from_arg(arg)
        assert names.singular == singular
        assert names.plural == plural

    def test_capitalized(self):
        names = ResourceNames.from_arg("userProfile")
        assert names.singular_cap == "UserProfile"
        assert names.plural_cap == "UserProfiles"

    @pytest.mark.parametrize("arg", ["", "   ", "s"])
    def test_invalid(self, arg: str):
        with pytest.raises(InvalidArgumentError):
            ResourceNames.from_arg(arg)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_artifact_paths_follow_plural_convention(self, config: Config):
        names = ResourceNames.from_arg("widget")
        assert artifact_path(config, names, ArtifactKind.MODEL) == config.models_dir / "widget.js"
        assert (
            artifact_path(config, names, ArtifactKind.CONTROLLER)
            == config.controllers_dir / "widgetsController.js"
        )
        assert artifact_path(config, names, ArtifactKind.ROUTE) == config.routes_dir / "widgets.js"

    def test_parse_artifact_kind(self):
        assert parse_artifact_kind(None) == ALL_ARTIFACTS
        assert parse_artifact_kind("route") == (ArtifactKind.ROUTE,)
        with pytest.raises(InvalidArgumentError, match="Unknown artifact kind"):
            parse_artifact_kind("view")

    def test_build_context(self):
        ctx = build_context(ResourceNames.from_arg("widget"), {"id": "string", "color": "string"})
        assert ctx["singular_cap"] == "Widget"
        assert ctx["plural_cap"] == "Widgets"
        assert ctx["instance_fields"] == ["color"]


# ---------------------------------------------------------------------------
# scaffold()
# ---------------------------------------------------------------------------


class TestScaffold:
    async def test_first_run_creates_everything(self, scaffolder: ResourceScaffolder, config: Config):
        report = await scaffolder.scaffold("widget", ["color:string"])
        assert report.names.plural == "widgets"
        assert report.schema_change.action is SchemaAction.CREATED
        assert [a.status for a in report.artifacts] == [ArtifactStatus.CREATED] * 3
        for kind in ALL_ARTIFACTS:
            assert artifact_path(config, report.names, kind).exists()
        assert config.schema_path.exists()

    async def test_second_run_is_a_noop(self, scaffolder: ResourceScaffolder, config: Config):
        await scaffolder.scaffold("widget", ["color:string"])
        before = _snapshot(config.root)
        report = await scaffolder.scaffold("widget", ["color:string"])
        assert _snapshot(config.root) == before
        assert report.schema_change.action is SchemaAction.UNCHANGED
        assert report.written == []

    async def test_plural_and_singular_args_converge(self, scaffolder: ResourceScaffolder, config: Config):
        await scaffolder.scaffold("widget", ["color:string"])
        before = _snapshot(config.root)
        await scaffolder.scaffold("widgets", ["color:string"])
        assert _snapshot(config.root) == before

    async def test_partial_run_is_completed(self, scaffolder: ResourceScaffolder, config: Config):
        await scaffolder.scaffold("widget", ["color:string"], only="model")
        names = ResourceNames.from_arg("widget")
        assert not artifact_path(config, names, ArtifactKind.CONTROLLER).exists()

        report = await scaffolder.scaffold("widget", ["color:string"])
        statuses = {a.kind: a.status for a in report.artifacts}
        assert statuses == {
            ArtifactKind.MODEL: ArtifactStatus.SKIPPED,
            ArtifactKind.CONTROLLER: ArtifactStatus.CREATED,
            ArtifactKind.ROUTE: ArtifactStatus.CREATED,
        }

    async def test_only_selector_ignores_other_kinds(self, scaffolder: ResourceScaffolder, config: Config):
        report = await scaffolder.scaffold("widget", only=ArtifactKind.ROUTE)
        assert [a.kind for a in report.artifacts] == [ArtifactKind.ROUTE]
        assert not config.models_dir.exists()
        assert not config.controllers_dir.exists()

    async def test_force_overwrites_manual_edits(self, scaffolder: ResourceScaffolder, config: Config):
        await scaffolder.scaffold("widget", ["color:string"])
        route = config.routes_dir / "widgets.js"
        route.write_text("// hand edited\n", encoding="utf-8")

        report = await scaffolder.scaffold("widget", ["color:string"], force=True)
        assert all(a.status is ArtifactStatus.OVERWRITTEN for a in report.artifacts)
        assert "hand edited" not in route.read_text(encoding="utf-8")

    async def test_without_force_manual_edits_survive(self, scaffolder: ResourceScaffolder, config: Config):
        await scaffolder.scaffold("widget")
        route = config.routes_dir / "widgets.js"
        route.write_text("// hand edited\n", encoding="utf-8")
        await scaffolder.scaffold("widget")
        assert route.read_text(encoding="utf-8") == "// hand edited\n"

    async def test_default_fields(self, memory_scaffolder: ResourceScaffolder, schema_doc: MemoryDocument):
        await memory_scaffolder.scaffold("widget")
        assert schema_doc.data == {"widgets": {"id": "string", "name": "string"}}

    async def test_force_merges_schema_and_regenerates_model(
        self, memory_scaffolder: ResourceScaffolder, config: Config, schema_doc: MemoryDocument,
        backup_doc: MemoryDocument,
    ):
        await memory_scaffolder.scaffold("widget", ["color:string"])
        report = await memory_scaffolder.scaffold("widget", ["size:number"], force=True)
        assert report.schema_change.action is SchemaAction.MERGED
        assert schema_doc.data["widgets"] == {"id": "string", "color": "string", "size": "number"}
        assert backup_doc.data == {"widgets": {"id": "string", "color": "string"}}
        model = (config.models_dir / "widget.js").read_text(encoding="utf-8")
        assert "color: 'string'" in model
        assert "size: 'number'" in model

    async def test_reset_replaces_schema_but_keeps_files(
        self, memory_scaffolder: ResourceScaffolder, config: Config, schema_doc: MemoryDocument
    ):
        await memory_scaffolder.scaffold("widget", ["a:string", "b:string"])
        model_before = (config.models_dir / "widget.js").read_text(encoding="utf-8")
        report = await memory_scaffolder.scaffold("widget", ["c:string"], reset=True)
        assert report.schema_change.action is SchemaAction.RESET
        assert set(schema_doc.data["widgets"]) - {"id"} == {"c"}
        assert report.written == []
        assert (config.models_dir / "widget.js").read_text(encoding="utf-8") == model_before

    @pytest.mark.parametrize("flag", ["reset", "force"])
    @pytest.mark.parametrize("only", ["route", "controller"])
    async def test_schema_untouched_without_model(
        self, memory_scaffolder: ResourceScaffolder, config: Config,
        schema_doc: MemoryDocument, backup_doc: MemoryDocument, flag: str, only: str,
    ):
        await memory_scaffolder.scaffold("widget", ["a:string", "b:number"])
        saves_before = schema_doc.saves

        report = await memory_scaffolder.scaffold(
            "widget", ["c:boolean"], only=only, **{flag: True}
        )
        assert report.schema_change.action is SchemaAction.UNCHANGED
        assert schema_doc.data["widgets"] == {"id": "string", "a": "string", "b": "number"}
        assert schema_doc.saves == saves_before
        assert backup_doc.saves == 0
        model = (config.models_dir / "widget.js").read_text(encoding="utf-8")
        assert "a: 'string'" in model

    async def test_only_route_creates_missing_schema(
        self, memory_scaffolder: ResourceScaffolder, schema_doc: MemoryDocument
    ):
        report = await memory_scaffolder.scaffold("widget", ["c:boolean"], only="route", reset=True)
        assert report.schema_change.action is SchemaAction.CREATED
        assert schema_doc.data["widgets"] == {"id": "string", "c": "boolean"}

    async def test_only_model_with_reset_changes_schema(
        self, memory_scaffolder: ResourceScaffolder, config: Config, schema_doc: MemoryDocument
    ):
        await memory_scaffolder.scaffold("widget", ["a:string"])
        await memory_scaffolder.scaffold("widget", ["c:boolean"], only="model", reset=True, force=True)
        assert schema_doc.data["widgets"] == {"id": "string", "c": "boolean"}
        model = (config.models_dir / "widget.js").read_text(encoding="utf-8")
        assert "c: 'boolean'" in model
        assert "a: 'string'" not in model

    async def test_existing_schema_drives_model(
        self, memory_scaffolder: ResourceScaffolder, config: Config
    ):
        await memory_scaffolder.scaffold("widget", ["color:string"], only="controller")
        await memory_scaffolder.scaffold("widget", ["other:number"], only="model")
        model = (config.models_dir / "widget.js").read_text(encoding="utf-8")
        assert "color: 'string'" in model
        assert "other" not in model

    async def test_invalid_field_type_touches_nothing(self, scaffolder: ResourceScaffolder, config: Config):
        with pytest.raises(InvalidArgumentError):
            await scaffolder.scaffold("widget", ["born:date"])
        assert _snapshot(config.root) == {}

    async def test_invalid_selector_touches_nothing(self, scaffolder: ResourceScaffolder, config: Config):
        with pytest.raises(InvalidArgumentError):
            await scaffolder.scaffold("widget", only="view")
        assert _snapshot(config.root) == {}


# ---------------------------------------------------------------------------
# scaffold_from_values()
# ---------------------------------------------------------------------------


class TestScaffoldFromValues:
    async def test_infers_schema(self, memory_scaffolder: ResourceScaffolder, schema_doc: MemoryDocument):
        report = await memory_scaffolder.scaffold_from_values(
            "person", {"name": "Tom Hardy", "age": 47}
        )
        assert report.names.plural == "persons"
        assert schema_doc.data["persons"] == {"id": "string", "name": "string", "age": "number"}
        assert len(report.written) == 3

    async def test_keeps_existing_schema(self, memory_scaffolder: ResourceScaffolder, schema_doc: MemoryDocument):
        await memory_scaffolder.scaffold("widget", ["color:string"])
        report = await memory_scaffolder.scaffold_from_values("widget", {"size": 2})
        assert report.schema_change.action is SchemaAction.UNCHANGED
        assert schema_doc.data["widgets"] == {"id": "string", "color": "string"}
        assert report.written == []


# ---------------------------------------------------------------------------
# Support files
# ---------------------------------------------------------------------------


class TestSupportFiles:
    async def test_data_service_written_once(self, scaffolder: ResourceScaffolder, config: Config):
        path = await scaffolder.ensure_data_service()
        assert path == config.services_dir / "dataService.js"
        path.write_text("// custom\n", encoding="utf-8")
        assert await scaffolder.ensure_data_service() is None
        assert path.read_text(encoding="utf-8") == "// custom\n"

    async def test_server_written_once(self, scaffolder: ResourceScaffolder, config: Config):
        path = await scaffolder.ensure_server(port=4000)
        assert path == config.server_path
        assert "process.env.PORT || 4000" in path.read_text(encoding="utf-8")
        assert await scaffolder.ensure_server() is None


# ---------------------------------------------------------------------------
# teardown()
# ---------------------------------------------------------------------------


class TestTeardown:
    async def test_removes_everything(
        self, memory_scaffolder: ResourceScaffolder, config: Config,
        schema_doc: MemoryDocument, store_doc: MemoryDocument,
    ):
        report = await memory_scaffolder.scaffold("widget", ["color:string"])
        await memory_scaffolder.instances.create("widgets", report.schema_change.fields, {"color": "red"})
        await memory_scaffolder.scaffold("gadget")

        teardown = await memory_scaffolder.teardown("widgets")
        assert len(teardown.deleted) == 3
        assert teardown.schema_removed is True
        assert teardown.instances_removed == 1
        assert not (config.models_dir / "widget.js").exists()
        assert "widgets" not in schema_doc.data
        assert "gadgets" in schema_doc.data
        assert "widgets" not in store_doc.data

    async def test_teardown_of_unknown_resource(self, memory_scaffolder: ResourceScaffolder):
        teardown = await memory_scaffolder.teardown("ghost")
        assert teardown.deleted == []
        assert teardown.schema_removed is False
        assert teardown.instances_removed == 0
