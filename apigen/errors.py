"""Exception hierarchy for apigen.

Not-found outcomes are plain return values (``None`` / ``False``); only
conditions the operator has to act on are raised.
"""

from __future__ import annotations

from pathlib import Path


class ApiGenError(Exception):
    """Base class for every error surfaced to the operator."""


class DocumentError(ApiGenError):
    """Raised when a JSON document on disk cannot be parsed."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Invalid JSON in {self.path}: {message}")


class InvalidArgumentError(ApiGenError):
    """Raised for unsupported arguments, before any file is touched."""
