"""apigen command-line interface.

Usage::

    apigen resource widget --fields color:string size:number
    apigen resource widget --fields weight:number --force
    apigen new widget color:"red" size:3
    apigen list widgets
    apigen route books id get
    apigen destroy widget
    apigen destroy instance widget <id|name>
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from apigen import __version__
from apigen.config import Config
from apigen.errors import ApiGenError, InvalidArgumentError
from apigen.kv_args import parse_kv_args
from apigen.scaffolder.generator import (
    ArtifactKind,
    ArtifactStatus,
    ResourceNames,
    ResourceScaffolder,
    ScaffoldReport,
)
from apigen.scaffolder.route_gen import RouteGenerator, normalize_method, route_label
from apigen.store.schema_registry import SchemaAction
from apigen.utils import (
    console,
    display_path,
    print_error,
    print_info,
    print_records_table,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def cmd_resource(config: Config, args: argparse.Namespace) -> int:
    scaffolder = ResourceScaffolder(config)
    report = await scaffolder.scaffold(
        args.name,
        args.fields,
        only=args.only,
        force=args.force,
        reset=args.reset,
    )
    await _ensure_support_files(scaffolder, init_server=args.init_server)
    _print_report(config, report)
    return 0


async def cmd_new(config: Config, args: argparse.Namespace) -> int:
    values = parse_kv_args(args.pairs)
    if not values:
        print_error("Provide at least one key:value pair")
        return 1

    scaffolder = ResourceScaffolder(config)
    report = await scaffolder.scaffold_from_values(args.resource, values)
    await _ensure_support_files(scaffolder, init_server=args.init_server)
    _print_report(config, report)

    fields = report.schema_change.fields if report.schema_change else {}
    unknown = sorted(set(values) - set(fields))
    if unknown:
        print_warning(f"Ignored fields not in the {report.names.plural} schema: {', '.join(unknown)}")

    record = await scaffolder.instances.create(report.names.plural, fields, values)
    print_success(f"Created {report.names.singular} #{record['id']} in {report.names.plural}")
    print_summary_table(record, title=report.names.singular)
    return 0


async def cmd_list(config: Config, args: argparse.Namespace) -> int:
    names = ResourceNames.from_arg(args.resource)
    scaffolder = ResourceScaffolder(config)
    records = await scaffolder.instances.list_all(names.plural)
    if not records:
        print_warning(f"No {names.plural} found")
        return 0
    print_records_table(records, title=names.plural)
    return 0


async def cmd_route(config: Config, args: argparse.Namespace) -> int:
    if len(args.rest) == 1:
        param, method = None, args.rest[0]
    elif len(args.rest) == 2:
        param, method = args.rest
    else:
        raise InvalidArgumentError("Usage: apigen route <resource> [param] <method>")

    method = normalize_method(method)
    generator = RouteGenerator(config)
    label = route_label(method, args.resource, param)
    if await generator.generate(args.resource, method, param):
        print_success(f"Generated {label}")
        print_info(f"Previous server saved to {display_path(config.server_backup_path, config.root)}")
    else:
        print_warning(f"Skipped (exists): {label}")
    return 0


async def cmd_destroy(config: Config, args: argparse.Namespace) -> int:
    scaffolder = ResourceScaffolder(config)
    target = args.target

    if target[0] == "instance":
        if len(target) != 3:
            raise InvalidArgumentError("Usage: apigen destroy instance <resource> <id|name>")
        names = ResourceNames.from_arg(target[1])
        removed = await scaffolder.instances.remove_by_id_or_name(names.plural, target[2])
        if removed is None:
            print_warning("No matching instance found")
            return 0
        print_success(f"Removed instance with id: {removed}")
        return 0

    if len(target) != 1:
        raise InvalidArgumentError("Usage: apigen destroy <resource>")
    report = await scaffolder.teardown(target[0])
    for path in report.deleted:
        print_warning(f"Deleted: {display_path(path, config.root)}")
    if report.schema_removed:
        print_warning(f"Removed from schema: {report.names.plural}")
    if report.instances_removed:
        print_warning(f"Removed {report.instances_removed} instance(s) of: {report.names.plural}")
    if not (report.deleted or report.schema_removed or report.instances_removed):
        print_info(f"Nothing to remove for {report.names.plural}")
    return 0


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


async def _ensure_support_files(scaffolder: ResourceScaffolder, *, init_server: bool) -> None:
    config = scaffolder.config
    written = await scaffolder.ensure_data_service()
    if written is not None:
        print_success(f"Created: {display_path(written, config.root)}")
    if init_server:
        server = await scaffolder.ensure_server()
        if server is not None:
            print_success(f"Created: {display_path(server, config.root)}")
            print_info('This server needs "express" and "fast-glob" in your project: npm i express fast-glob')


def _print_report(config: Config, report: ScaffoldReport) -> None:
    change = report.schema_change
    if change is not None:
        schema_file = display_path(config.schema_path, config.root)
        if change.action is SchemaAction.UNCHANGED:
            print_warning(f"Skipped schema update: {change.resource} already exists")
        else:
            print_success(f"Schema {change.action.value} for {change.resource} in {schema_file}")
        if change.backed_up:
            print_info(f"Schema backed up to {display_path(config.backup_path, config.root)}")

    for artifact in report.artifacts:
        rel = display_path(artifact.path, config.root)
        if artifact.status is ArtifactStatus.SKIPPED:
            print_warning(f"Skipped (exists): {rel}")
        else:
            print_success(f"{artifact.status.value.capitalize()}: {rel}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apigen",
        description="Scaffold resources & instances into the current project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  apigen resource widget --fields color:string size:number\n"
            '  apigen new widget color:"red" size:3\n'
            "  apigen route books id get\n"
            "  apigen destroy instance widget <id|name>\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--root",
        default=None,
        help="Target project root (default: $APIGEN_ROOT or the current directory)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    resource = sub.add_parser("resource", help="Define/extend a resource schema and scaffold its files")
    resource.add_argument("name", help="Resource name, singular or plural")
    resource.add_argument(
        "--fields",
        nargs="+",
        default=None,
        metavar="NAME:TYPE",
        help="Field declarations (default: id:string name:string)",
    )
    resource.add_argument(
        "--only",
        choices=[k.value for k in ArtifactKind],
        default=None,
        help="Only generate one artifact kind",
    )
    resource.add_argument("--force", action="store_true", help="Merge fields and overwrite existing files")
    resource.add_argument("--reset", action="store_true", help="Replace the schema instead of merging")
    resource.add_argument("--init-server", action="store_true", help="Also scaffold src/server.js if missing")
    resource.set_defaults(handler=cmd_resource)

    new = sub.add_parser("new", help="Create an instance, inferring the schema if needed")
    new.add_argument("resource", help="Resource name, singular or plural")
    new.add_argument("pairs", nargs="*", metavar="KEY:VALUE", help='e.g. name:"Tom Hardy" age:47')
    new.add_argument("--init-server", action="store_true", help="Also scaffold src/server.js if missing")
    new.set_defaults(handler=cmd_new)

    listing = sub.add_parser("list", help="List the stored instances of a resource")
    listing.add_argument("resource")
    listing.set_defaults(handler=cmd_list)

    route = sub.add_parser("route", help="Append a single-method route to src/server.js")
    route.add_argument("resource", help="Resource name as used in the URL (e.g. books)")
    route.add_argument("rest", nargs="+", metavar="[PARAM] METHOD", help="Optional param name, then get/post/put/delete")
    route.set_defaults(handler=cmd_route)

    destroy = sub.add_parser("destroy", help="Remove a resource, or one instance of it")
    destroy.add_argument("target", nargs="+", metavar="TARGET", help="<resource> | instance <resource> <id|name>")
    destroy.set_defaults(handler=cmd_destroy)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``apigen`` / ``python -m apigen``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.root:
        config.root = Path(args.root)
    elif config.root == Path("."):
        config.root = Path.cwd()

    try:
        return asyncio.run(args.handler(config, args))
    except ApiGenError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
