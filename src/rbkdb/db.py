"""
db.py — SQLite connection helper.

Usage:
    from rbkdb.db import open_database

    conn = open_database(Path("rebrickable.db"))
    try:
        ...
    finally:
        conn.close()

The connection is returned in autocommit mode (isolation_level=None) so
callers own transaction boundaries explicitly (BEGIN / COMMIT / ROLLBACK),
with foreign key enforcement switched on.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from rbkdb.errors import SchemaVersionError
from rbkdb.schema import MIGRATIONS, SCHEMA_VERSION

logger = structlog.get_logger(__name__)


def open_database(path: Path | str) -> sqlite3.Connection:
    """
    Open (creating if needed) the SQLite database at *path* and bring its
    schema up to date.

    Args:
        path: Database file, or ":memory:".

    Returns:
        sqlite3.Connection in autocommit mode with foreign keys enforced.
    """
    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), isolation_level=None)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        migrate(conn)
    except Exception:
        conn.close()
        raise
    logger.info("database_opened", path=str(path), schema_version=SCHEMA_VERSION)
    return conn


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def migrate(conn: sqlite3.Connection) -> int:
    """
    Apply every pending migration, each in its own transaction.

    Returns:
        Number of migrations applied.
    """
    current = schema_version(conn)
    if current > SCHEMA_VERSION:
        raise SchemaVersionError(current, SCHEMA_VERSION)

    applied = 0
    for version in range(current, SCHEMA_VERSION):
        script = MIGRATIONS[version]
        # executescript() issues its own COMMIT first, so wrap the script
        # and the version bump together.
        conn.executescript(
            f"BEGIN;\n{script}\nPRAGMA user_version = {version + 1};\nCOMMIT;"
        )
        applied += 1
        logger.debug("migration_applied", version=version + 1)
    return applied
