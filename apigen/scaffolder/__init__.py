"""apigen scaffolder -- generates Express CRUD modules for a resource.

Quick usage::

    from apigen.config import Config
    from apigen.scaffolder import ResourceScaffolder

    scaffolder = ResourceScaffolder(Config(root="./my-api"))
    report = await scaffolder.scaffold("widget", ["color:string"])
"""

from apigen.scaffolder.generator import (
    ArtifactKind,
    ArtifactStatus,
    ResourceNames,
    ResourceScaffolder,
    ScaffoldReport,
)
from apigen.scaffolder.route_gen import RouteGenerator
from apigen.scaffolder.templates import TemplateRenderer

__all__ = [
    "ArtifactKind",
    "ArtifactStatus",
    "ResourceNames",
    "ResourceScaffolder",
    "RouteGenerator",
    "ScaffoldReport",
    "TemplateRenderer",
]
