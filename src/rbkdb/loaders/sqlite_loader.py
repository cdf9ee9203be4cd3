"""
loaders/sqlite_loader.py — transactional bulk loader for the SQLite store.

Every table is loaded the same way:
  1. decode the whole .csv.gz file (any bad row aborts before the store
     is touched)
  2. BEGIN
  3. run the table's pre-hook, if any
  4. executemany() one INSERT statement over the records, in file order
  5. run the table's post-hook, if any
  6. COMMIT, or ROLLBACK and raise LoadError on any failure

Tables are loaded one at a time in catalog.LOAD_ORDER so foreign keys
always point at already committed parents. A failed table stops the run;
tables committed before it stay committed.

The themes table references itself through parent_id, and the CSV does
not list parents before children. Its rows are inserted with a NULL
parent_id and the post-hook fills parent_id in from the decoded records,
once every theme row exists, still inside the same transaction.

Usage:
    from rbkdb.db import open_database
    from rbkdb.loaders.sqlite_loader import load_all

    conn = open_database("rebrickable.db")
    results = load_all(conn, Path("/tmp/rbk"))
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final, Mapping

import structlog

from rbkdb.catalog import LOAD_ORDER, TableSpec, get_table
from rbkdb.errors import LoadError
from rbkdb.models import (
    Color,
    Element,
    Inventory,
    InventoryMinifig,
    InventoryPart,
    InventorySet,
    Minifig,
    Part,
    PartCategory,
    PartRelationship,
    Record,
    Set,
    Theme,
)
from rbkdb.transforms.decode import read_records

log = structlog.get_logger(__name__)

Hook = Callable[[sqlite3.Connection, Sequence[Any]], None]


@dataclass
class LoadResult:
    """Summary of one table load."""

    table: str
    records_loaded: int = 0
    duration_ms: int = 0


@dataclass(frozen=True)
class BulkInsert:
    """How one table is written: the INSERT, the row binder and the hooks."""

    statement: str
    bind: Callable[[Any], tuple[Any, ...]]
    pre_hook: Hook | None = None
    post_hook: Hook | None = None


def _url(value: Any) -> str | None:
    return str(value) if value is not None else None


# ---------------------------------------------------------------------------
# Themes: deferred parent_id resolution
# ---------------------------------------------------------------------------


def _resolve_theme_parents(conn: sqlite3.Connection, records: Sequence[Theme]) -> None:
    """Set parent_id on every theme row that has one, after all rows exist."""
    links = [(t.parent_id, t.id) for t in records if t.parent_id is not None]
    conn.executemany("UPDATE themes SET parent_id = ? WHERE id = ?", links)
    log.debug("theme_parents_resolved", links=len(links))


# ---------------------------------------------------------------------------
# Per-table statements
# ---------------------------------------------------------------------------


def _bind_color(r: Color) -> tuple[Any, ...]:
    return (r.id, r.name, str(r.rgb), int(r.is_trans))


def _bind_part_category(r: PartCategory) -> tuple[Any, ...]:
    return (r.id, r.name)


def _bind_part(r: Part) -> tuple[Any, ...]:
    return (r.part_num, r.name, r.part_cat_id, r.part_material.value)


def _bind_part_relationship(r: PartRelationship) -> tuple[Any, ...]:
    return (r.rel_type.value, r.child_part_num, r.parent_part_num)


def _bind_element(r: Element) -> tuple[Any, ...]:
    return (r.element_id, r.part_num, r.color_id, r.design_id)


def _bind_minifig(r: Minifig) -> tuple[Any, ...]:
    return (r.fig_num, r.name, r.num_parts, _url(r.img_url))


def _bind_theme(r: Theme) -> tuple[Any, ...]:
    # parent_id is written by _resolve_theme_parents.
    return (r.id, r.name, None)


def _bind_set(r: Set) -> tuple[Any, ...]:
    return (r.set_num, r.name, r.year, r.theme_id, r.num_parts, _url(r.img_url))


def _bind_inventory(r: Inventory) -> tuple[Any, ...]:
    return (r.id, r.version, r.set_num)


def _bind_inventory_part(r: InventoryPart) -> tuple[Any, ...]:
    return (
        r.inventory_id,
        r.part_num,
        r.color_id,
        r.quantity,
        int(r.is_spare),
        _url(r.img_url),
    )


def _bind_inventory_minifig(r: InventoryMinifig) -> tuple[Any, ...]:
    return (r.inventory_id, r.fig_num, r.quantity)


def _bind_inventory_set(r: InventorySet) -> tuple[Any, ...]:
    return (r.inventory_id, r.set_num, r.quantity)


BULK_INSERTS: Final[Mapping[str, BulkInsert]] = MappingProxyType(
    {
        "colors": BulkInsert(
            "INSERT INTO colors (id, name, rgb, is_trans) VALUES (?, ?, ?, ?)",
            _bind_color,
        ),
        "part_categories": BulkInsert(
            "INSERT INTO part_categories (id, name) VALUES (?, ?)",
            _bind_part_category,
        ),
        "parts": BulkInsert(
            "INSERT INTO parts (part_num, name, part_cat_id, part_material) "
            "VALUES (?, ?, ?, ?)",
            _bind_part,
        ),
        "part_relationships": BulkInsert(
            "INSERT INTO part_relationships (rel_type, child_part_num, parent_part_num) "
            "VALUES (?, ?, ?)",
            _bind_part_relationship,
        ),
        "elements": BulkInsert(
            "INSERT INTO elements (element_id, part_num, color_id, design_id) "
            "VALUES (?, ?, ?, ?)",
            _bind_element,
        ),
        "minifigs": BulkInsert(
            "INSERT INTO minifigs (fig_num, name, num_parts, img_url) VALUES (?, ?, ?, ?)",
            _bind_minifig,
        ),
        "themes": BulkInsert(
            "INSERT INTO themes (id, name, parent_id) VALUES (?, ?, ?)",
            _bind_theme,
            post_hook=_resolve_theme_parents,
        ),
        "sets": BulkInsert(
            "INSERT INTO sets (set_num, name, year, theme_id, num_parts, img_url) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            _bind_set,
        ),
        "inventories": BulkInsert(
            "INSERT INTO inventories (id, version, set_num) VALUES (?, ?, ?)",
            _bind_inventory,
        ),
        "inventory_parts": BulkInsert(
            "INSERT INTO inventory_parts "
            "(inventory_id, part_num, color_id, quantity, is_spare, img_url) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            _bind_inventory_part,
        ),
        "inventory_minifigs": BulkInsert(
            "INSERT INTO inventory_minifigs (inventory_id, fig_num, quantity) "
            "VALUES (?, ?, ?)",
            _bind_inventory_minifig,
        ),
        "inventory_sets": BulkInsert(
            "INSERT INTO inventory_sets (inventory_id, set_num, quantity) "
            "VALUES (?, ?, ?)",
            _bind_inventory_set,
        ),
    }
)


class SqliteLoader:
    """
    Writes decoded records into an open SQLite connection.

    The connection must be in autocommit mode (as returned by
    rbkdb.db.open_database) so that transactions are controlled here.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        bulk_inserts: Mapping[str, BulkInsert] = BULK_INSERTS,
    ) -> None:
        self._conn = conn
        self._bulk_inserts = bulk_inserts

    # ------------------------------------------------------------------
    # Core insert
    # ------------------------------------------------------------------

    def load_table(self, table: TableSpec, records: Sequence[Record]) -> LoadResult:
        """
        Insert *records* into *table* inside a single transaction.

        Returns:
            LoadResult with the number of rows inserted.

        Raises:
            LoadError: the transaction was rolled back. Wraps the sqlite3
                error, or any other failure from a binder or hook.
        """
        spec = self._bulk_inserts[table.name]
        result = LoadResult(table=table.name)
        loader_log = log.bind(table=table.name, total_rows=len(records))
        loader_log.info("load_start")
        t0 = time.monotonic()

        conn = self._conn
        conn.execute("BEGIN")
        try:
            if spec.pre_hook is not None:
                spec.pre_hook(conn, records)
            conn.executemany(spec.statement, (spec.bind(r) for r in records))
            if spec.post_hook is not None:
                spec.post_hook(conn, records)
            conn.execute("COMMIT")
        except Exception as exc:
            _rollback(conn)
            loader_log.error("load_failed", error=str(exc), error_type=type(exc).__name__)
            raise LoadError(table.name, f"{type(exc).__name__}: {exc}") from exc
        except BaseException:
            _rollback(conn)
            raise

        result.records_loaded = len(records)
        result.duration_ms = int((time.monotonic() - t0) * 1000)
        loader_log.info(
            "load_complete",
            records_loaded=result.records_loaded,
            duration_ms=result.duration_ms,
        )
        return result

    def load_file(self, table: TableSpec, path: Path) -> LoadResult:
        """Decode *path* completely, then load it with load_table()."""
        try:
            f = open(path, "rb")
        except OSError as exc:
            log.error("load_failed", table=table.name, error=str(exc), path=str(path))
            raise LoadError(table.name, f"cannot read {path}: {exc}") from exc
        with f:
            records = read_records(f, table)
        log.info("records_decoded", table=table.name, records=len(records))
        return self.load_table(table, records)


def _rollback(conn: sqlite3.Connection) -> None:
    # SQLite may already have rolled back on its own (e.g. disk full).
    if conn.in_transaction:
        conn.execute("ROLLBACK")


def load_all(
    conn: sqlite3.Connection,
    input_dir: Path,
    tables: Sequence[str] = LOAD_ORDER,
) -> list[LoadResult]:
    """
    Load every table file from *input_dir*, one table at a time.

    Args:
        conn:      Autocommit SQLite connection with the schema applied.
        input_dir: Directory holding the downloaded <table>.csv.gz files.
        tables:    Table names in load order (default: LOAD_ORDER).

    Returns:
        One LoadResult per table, in load order.

    Raises:
        DecodeError, LoadError: the first failure; later tables are not
            attempted.
    """
    loader = SqliteLoader(conn)
    results: list[LoadResult] = []
    for name in tables:
        table = get_table(name)
        results.append(loader.load_file(table, input_dir / table.filename))
    log.info(
        "load_all_complete",
        tables=len(results),
        records_loaded=sum(r.records_loaded for r in results),
    )
    return results
