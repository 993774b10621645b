"""Single-method route generation into ``server.js``.

Inserts one inline Express route, rendered from ``templates/inline/``, in
front of the server's ``app.listen(`` call.  The server file is copied to
``server.backup.js`` before it is rewritten and restored from that copy if
the write fails.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from apigen.config import Config
from apigen.errors import ApiGenError, InvalidArgumentError

from .templates import TemplateRenderer

SUPPORTED_METHODS: tuple[str, ...] = ("get", "post", "put", "delete")

_LISTEN_MARKER = "app.listen("


def normalize_method(method: str) -> str:
    """Lower-case *method* and check it is a supported HTTP method.

    Raises:
        InvalidArgumentError: For anything outside GET/POST/PUT/DELETE.
    """
    normalized = (method or "").strip().lower()
    if normalized not in SUPPORTED_METHODS:
        raise InvalidArgumentError(
            f"Invalid HTTP method {method!r} (expected one of: "
            f"{', '.join(m.upper() for m in SUPPORTED_METHODS)})"
        )
    return normalized


def route_label(method: str, resource: str, param: str | None) -> str:
    """Human-readable label such as ``GET /books/:id``."""
    suffix = f"/:{param}" if param and method != "post" else ""
    return f"{method.upper()} /{resource}{suffix}"


class RouteGenerator:
    """Appends single-method routes to the project's ``server.js``."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    def render(self, resource: str, method: str, param: str | None = None) -> str:
        """Render the inline route for *method* without touching any file."""
        method = normalize_method(method)
        resource = resource.strip()
        if not resource:
            raise InvalidArgumentError("Resource name is required")
        if method in ("put", "delete") and not param:
            raise InvalidArgumentError(f"{method.upper()} routes need a parameter name (e.g. id)")
        return self.renderer.render(
            f"inline/{method}.js.j2", {"resource": resource, "param": param or None}
        )

    async def generate(self, resource: str, method: str, param: str | None = None) -> bool:
        """Insert the route into ``server.js``.

        Returns ``False`` when an identical route is already present.

        Raises:
            InvalidArgumentError: For an unsupported method or missing param.
            ApiGenError: When ``server.js`` is missing, has no ``app.listen(``
                call, or cannot be rewritten (after restoring the backup).
        """
        route = self.render(resource, method, param)
        server = self.config.server_path
        backup = self.config.server_backup_path

        if not await asyncio.to_thread(server.exists):
            raise ApiGenError(
                f"{server} not found; run `apigen resource <name> --init-server` first"
            )
        content = await asyncio.to_thread(server.read_text, encoding="utf-8")
        if route in content:
            return False
        if _LISTEN_MARKER not in content:
            raise ApiGenError(f"No `{_LISTEN_MARKER}` call found in {server}")

        updated = content.replace(_LISTEN_MARKER, f"{route}\n{_LISTEN_MARKER}", 1)
        await asyncio.to_thread(shutil.copyfile, server, backup)
        try:
            await asyncio.to_thread(_write, server, updated)
        except OSError as exc:
            await asyncio.to_thread(shutil.copyfile, backup, server)
            raise ApiGenError(f"Failed to update {server}: {exc}") from exc
        return True


def _write(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")
