"""
schema.py — versioned SQLite schema for the Rebrickable tables.

Migrations are applied in order by rbkdb.db.open_database(); the applied
version is tracked in PRAGMA user_version. The loader only performs DML
against this schema.
"""

from __future__ import annotations

from typing import Final

from rbkdb.models.types import PartMaterial, PartRelationType


def _in_list(values: list[str]) -> str:
    return ", ".join("'" + v.replace("'", "''") + "'" for v in values)


_RELATION_TYPES = _in_list([m.value for m in PartRelationType])
_MATERIALS = _in_list([m.value for m in PartMaterial])

_V1_INITIAL = f"""\
CREATE TABLE colors (
    id       INTEGER PRIMARY KEY,
    name     TEXT    NOT NULL,
    rgb      TEXT    NOT NULL,
    is_trans INTEGER NOT NULL CHECK (is_trans IN (0, 1))
);

CREATE TABLE part_categories (
    id   INTEGER PRIMARY KEY,
    name TEXT    NOT NULL
);

CREATE TABLE parts (
    part_num      TEXT    PRIMARY KEY,
    name          TEXT    NOT NULL,
    part_cat_id   INTEGER NOT NULL REFERENCES part_categories (id),
    part_material TEXT    NOT NULL CHECK (part_material IN ({_MATERIALS}))
);

CREATE TABLE part_relationships (
    rel_type        TEXT NOT NULL CHECK (rel_type IN ({_RELATION_TYPES})),
    child_part_num  TEXT NOT NULL REFERENCES parts (part_num),
    parent_part_num TEXT NOT NULL REFERENCES parts (part_num)
);

CREATE TABLE elements (
    element_id TEXT    PRIMARY KEY,
    part_num   TEXT    NOT NULL REFERENCES parts (part_num),
    color_id   INTEGER NOT NULL REFERENCES colors (id),
    design_id  INTEGER
);

CREATE TABLE minifigs (
    fig_num   TEXT    PRIMARY KEY,
    name      TEXT    NOT NULL,
    num_parts INTEGER NOT NULL,
    img_url   TEXT
);

CREATE TABLE themes (
    id        INTEGER PRIMARY KEY,
    name      TEXT    NOT NULL,
    parent_id INTEGER REFERENCES themes (id)
);

CREATE TABLE sets (
    set_num   TEXT    PRIMARY KEY,
    name      TEXT    NOT NULL,
    year      INTEGER NOT NULL,
    theme_id  INTEGER NOT NULL REFERENCES themes (id),
    num_parts INTEGER NOT NULL,
    img_url   TEXT
);

CREATE TABLE inventories (
    id      INTEGER PRIMARY KEY,
    version INTEGER NOT NULL,
    set_num TEXT    NOT NULL
);

CREATE TABLE inventory_parts (
    inventory_id INTEGER NOT NULL REFERENCES inventories (id),
    part_num     TEXT    NOT NULL REFERENCES parts (part_num),
    color_id     INTEGER NOT NULL REFERENCES colors (id),
    quantity     INTEGER NOT NULL,
    is_spare     INTEGER NOT NULL CHECK (is_spare IN (0, 1)),
    img_url      TEXT
);

CREATE TABLE inventory_minifigs (
    inventory_id INTEGER NOT NULL REFERENCES inventories (id),
    fig_num      TEXT    NOT NULL REFERENCES minifigs (fig_num),
    quantity     INTEGER NOT NULL,
    PRIMARY KEY (inventory_id, fig_num)
);

CREATE TABLE inventory_sets (
    inventory_id INTEGER NOT NULL REFERENCES inventories (id),
    set_num      TEXT    NOT NULL REFERENCES sets (set_num),
    quantity     INTEGER NOT NULL,
    PRIMARY KEY (inventory_id, set_num)
);

CREATE INDEX idx_parts_part_cat_id ON parts (part_cat_id);
CREATE INDEX idx_themes_parent_id ON themes (parent_id);
CREATE INDEX idx_sets_theme_id ON sets (theme_id);
CREATE INDEX idx_inventories_set_num ON inventories (set_num);
CREATE INDEX idx_inventory_parts_inventory_id ON inventory_parts (inventory_id);
"""

# Index i holds the script that upgrades user_version i to i + 1.
MIGRATIONS: Final[tuple[str, ...]] = (_V1_INITIAL,)

SCHEMA_VERSION: Final[int] = len(MIGRATIONS)
