"""
pipelines/dump.py — Rebrickable catalog → SQLite dump.

Steps:
  1. refuse to touch an existing database unless force=True (then delete it)
  2. download all catalog tables into a temporary directory
     (all must succeed before anything is loaded)
  3. create the database, apply the schema, and load the tables in
     dependency order, one transaction per table

Usage:
    from rbkdb.pipelines.dump import run
    result = await run(Path("rebrickable.db"), force=True)
"""

from __future__ import annotations

import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from rbkdb.db import open_database
from rbkdb.errors import DatabaseExistsError
from rbkdb.loaders.sqlite_loader import LoadResult, load_all
from rbkdb.sources.rebrickable import RebrickableClient
from rbkdb.utils.logging import get_logger

log = get_logger(__name__, pipeline="dump")


@dataclass
class DumpResult:
    """Outcome of a successful dump."""

    database: Path
    tables: list[LoadResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def records_loaded(self) -> int:
        return sum(t.records_loaded for t in self.tables)


def current_timestamp() -> int:
    """Seconds since the epoch, used as the download cache buster."""
    return int(time.time())


def prepare_output(database: Path, *, force: bool) -> None:
    """Raise DatabaseExistsError, or delete the old file when *force* is set."""
    if not database.exists():
        return
    if not force:
        raise DatabaseExistsError(database)
    log.warning("overwriting_database", path=str(database))
    database.unlink()


async def run(
    database: Path,
    *,
    force: bool = False,
    client: RebrickableClient | None = None,
    timestamp: int | None = None,
) -> DumpResult:
    """
    Run the dump end-to-end.

    Args:
        database:  SQLite file to create.
        force:     Overwrite *database* if it already exists.
        client:    Downloader to use (default: RebrickableClient()).
        timestamp: Cache-busting value (default: now).

    Returns:
        DumpResult with one LoadResult per table.

    Raises:
        DatabaseExistsError: *database* exists and force is False.
        FetchError:          a download failed; nothing was loaded.
        DecodeError, LoadError: a table failed; earlier tables stay committed.
    """
    t0 = time.monotonic()
    prepare_output(database, force=force)

    client = client or RebrickableClient()
    timestamp = timestamp if timestamp is not None else current_timestamp()
    log.info("dump_start", database=str(database), timestamp=timestamp)

    with tempfile.TemporaryDirectory(prefix="rbkdb-") as tmp:
        dump_dir = Path(tmp)
        await client.fetch_all(dump_dir, timestamp)

        conn = open_database(database)
        try:
            tables = load_all(conn, dump_dir)
        finally:
            conn.close()

    result = DumpResult(
        database=database,
        tables=tables,
        duration_ms=int((time.monotonic() - t0) * 1000),
    )
    log.info(
        "dump_complete",
        database=str(database),
        records_loaded=result.records_loaded,
        duration_ms=result.duration_ms,
    )
    return result
