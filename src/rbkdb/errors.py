"""Exceptions raised by the fetch, decode and load stages."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class RbkDbError(Exception):
    """Base exception for all rbkdb errors."""


class UnknownTableError(RbkDbError, KeyError):
    """Raised when a table name is not part of the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown table '{name}'")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class FetchError(RbkDbError):
    """Raised when a table cannot be downloaded (transport or HTTP status)."""

    def __init__(self, table: str, reason: str):
        super().__init__(f"Failed to download table '{table}': {reason}")
        self.table = table


class DecodeError(RbkDbError):
    """Raised (or yielded) when a CSV row does not match its record model.

    ``row`` is the 1-based data row number (the header is not counted);
    it is ``None`` when the stream itself is unreadable.
    """

    def __init__(
        self,
        table: str,
        message: str,
        *,
        row: int | None = None,
        field: str | None = None,
        value: Any = None,
    ):
        self.table = table
        self.row = row
        self.field = field
        self.value = value
        self.message = message

        loc = f"table '{table}'"
        if row is not None:
            loc += f", row {row}"
        if field is not None:
            loc += f", field '{field}'"
        detail = f"{loc}: {message}"
        if field is not None:
            detail += f" (value {value!r})"
        super().__init__(detail)


class LoadError(RbkDbError):
    """Raised when a table's transaction fails and is rolled back."""

    def __init__(self, table: str, reason: str):
        super().__init__(f"Failed to load table '{table}': {reason}")
        self.table = table


class DatabaseExistsError(RbkDbError):
    """Raised when the output database exists and overwriting was not requested."""

    def __init__(self, path: Path):
        super().__init__(
            f"Database already exists at '{path}'. Use --force to overwrite it."
        )
        self.path = path


class SchemaVersionError(RbkDbError):
    """Raised when a database was written by a newer rbkdb schema."""

    def __init__(self, found: int, supported: int):
        super().__init__(
            f"Database schema version {found} is newer than supported version {supported}"
        )
        self.found = found
        self.supported = supported
