"""
catalog.py — the fixed set of Rebrickable tables.

Each TableSpec names the logical table, the file served under
/media/downloads/ on the Rebrickable CDN, and the record model its rows
decode into. The catalog is read-only and shared by the downloader (what
to fetch) and the loader (how to decode and in which order to insert).

Usage:
    from rbkdb.catalog import LOAD_ORDER, get_table

    themes = get_table("themes")
    themes.filename   # "themes.csv.gz"
    themes.model      # rbkdb.models.Theme
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Mapping

from rbkdb.errors import UnknownTableError
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


@dataclass(frozen=True)
class TableSpec:
    """Descriptor of one downloadable Rebrickable table."""

    name: str
    model: type[Record]

    @property
    def filename(self) -> str:
        return f"{self.name}.csv.gz"


# Parents before the tables whose foreign keys reference them. The only
# exception is themes.parent_id, resolved inside the themes transaction.
TABLES: Final[tuple[TableSpec, ...]] = (
    TableSpec("colors", Color),
    TableSpec("part_categories", PartCategory),
    TableSpec("parts", Part),
    TableSpec("part_relationships", PartRelationship),
    TableSpec("elements", Element),
    TableSpec("minifigs", Minifig),
    TableSpec("themes", Theme),
    TableSpec("sets", Set),
    TableSpec("inventories", Inventory),
    TableSpec("inventory_parts", InventoryPart),
    TableSpec("inventory_minifigs", InventoryMinifig),
    TableSpec("inventory_sets", InventorySet),
)

LOAD_ORDER: Final[tuple[str, ...]] = tuple(t.name for t in TABLES)

_BY_NAME: Final[Mapping[str, TableSpec]] = MappingProxyType({t.name: t for t in TABLES})


def get_table(name: str) -> TableSpec:
    """Return the TableSpec called *name*, raising UnknownTableError if absent."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownTableError(name) from None
