"""
tests/conftest.py — Shared pytest fixtures for the rbkdb test suite.

Provides:
  sample_tables       — header + rows for all 12 tables, FK-consistent
  gz_csv()            — factory: header + rows -> gzip-compressed CSV bytes
  write_table()       — factory: writes one <table>.csv.gz into a directory
  sample_dump_dir     — tmp directory holding all 12 sample files
  db                  — freshly migrated SQLite connection
  mock_http           — configured respx router for faking HTTP responses
"""

from __future__ import annotations

import csv
import gzip
import io
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import respx

from rbkdb.db import open_database

Rows = list[list[str]]

# Themes are deliberately listed children-first.
SAMPLE_TABLES: dict[str, tuple[list[str], Rows]] = {
    "colors": (
        ["id", "name", "rgb", "is_trans"],
        [
            ["-1", "[Unknown]", "0033B2", "f"],
            ["0", "Black", "05131D", "f"],
            ["36", "Trans-Red", "C91A09", "t"],
        ],
    ),
    "part_categories": (
        ["id", "name"],
        [["1", "Baseplates"], ["11", "Bricks"], ["14", "Plates"]],
    ),
    "parts": (
        ["part_num", "name", "part_cat_id", "part_material"],
        [
            ["3001", "Brick 2 x 4", "11", "Plastic"],
            ["3001pr0001", "Brick 2 x 4, with print", "11", "Plastic"],
            ["3024", "Plate 1 x 1", "14", "Plastic"],
            ["bb0012", "Baseplate 16 x 16", "1", "Flexible Plastic"],
        ],
    ),
    "part_relationships": (
        ["rel_type", "child_part_num", "parent_part_num"],
        [["P", "3001pr0001", "3001"], ["A", "bb0012", "3024"]],
    ),
    "elements": (
        ["element_id", "part_num", "color_id", "design_id"],
        [["300126", "3001", "0", "3001"], ["4211389", "3024", "36", ""]],
    ),
    "minifigs": (
        ["fig_num", "name", "num_parts", "img_url"],
        [
            [
                "fig-000001",
                "Toy Store Employee",
                "4",
                "https://cdn.rebrickable.com/media/sets/fig-000001.jpg",
            ],
            ["fig-000002", "Customer", "4", ""],
        ],
    ),
    "themes": (
        ["id", "name", "parent_id"],
        [
            ["3", "Competition", "5"],
            ["5", "Model", "1"],
            ["1", "Technic", ""],
            ["18", "Star Wars Episode 4/5/6", "158"],
            ["158", "Star Wars", ""],
        ],
    ),
    "sets": (
        ["set_num", "name", "year", "theme_id", "num_parts", "img_url"],
        [
            ["001-1", "Gears", "1965", "1", "43", "https://cdn.rebrickable.com/media/sets/001-1.jpg"],
            ["7140-1", "X-wing Fighter", "1999", "18", "263", ""],
        ],
    ),
    "inventories": (
        ["id", "version", "set_num"],
        [["1", "1", "7140-1"], ["2", "1", "001-1"], ["3", "1", "fig-000001"]],
    ),
    "inventory_parts": (
        ["inventory_id", "part_num", "color_id", "quantity", "is_spare", "img_url"],
        [
            ["1", "3001", "0", "2", "f", ""],
            [
                "1",
                "3024",
                "36",
                "1",
                "t",
                "https://cdn.rebrickable.com/media/parts/elements/4211389.jpg",
            ],
            ["3", "3001", "0", "1", "f", ""],
        ],
    ),
    "inventory_minifigs": (
        ["inventory_id", "fig_num", "quantity"],
        [["1", "fig-000001", "1"]],
    ),
    "inventory_sets": (
        ["inventory_id", "set_num", "quantity"],
        [["2", "7140-1", "1"]],
    ),
}


def _csv_text(header: list[str], rows: Rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# CSV / gzip helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_tables() -> dict[str, tuple[list[str], Rows]]:
    return {name: (list(h), [list(r) for r in rows]) for name, (h, rows) in SAMPLE_TABLES.items()}


@pytest.fixture
def gz_csv() -> Callable[[list[str], Rows], bytes]:
    """Return a factory that renders header + rows as .csv.gz bytes."""

    def make(header: list[str], rows: Rows) -> bytes:
        return gzip.compress(_csv_text(header, rows).encode("utf-8"))

    return make


@pytest.fixture
def write_table(gz_csv) -> Callable[..., Path]:
    """Return a factory writing <name>.csv.gz under a directory."""

    def write(directory: Path, name: str, header: list[str], rows: Rows) -> Path:
        path = directory / f"{name}.csv.gz"
        path.write_bytes(gz_csv(header, rows))
        return path

    return write


@pytest.fixture
def sample_dump_dir(tmp_path: Path, write_table, sample_tables) -> Path:
    """A directory laid out like a completed download of the sample tables."""
    dump_dir = tmp_path / "dump"
    dump_dir.mkdir()
    for name, (header, rows) in sample_tables.items():
        write_table(dump_dir, name, header, rows)
    return dump_dir


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------

@pytest.fixture
def db(tmp_path: Path) -> Iterator:
    conn = open_database(tmp_path / "test.db")
    try:
        yield conn
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# respx HTTP mock router
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http():
    """
    Activate the respx mock router for all httpx requests.

    Usage in tests:
        def test_something(mock_http):
            mock_http.get(url__regex=r".*colors.*").mock(return_value=httpx.Response(200))
    """
    with respx.mock(assert_all_called=False) as router:
        yield router
