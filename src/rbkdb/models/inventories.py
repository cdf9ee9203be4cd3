"""
models/inventories.py — Pydantic models for inventories and the three
inventory contents tables.
"""

from __future__ import annotations

from rbkdb.models.base import Record
from rbkdb.models.types import Int, OptionalUrl, TFBool


class Inventory(Record):
    """Matches the inventories table row.

    ``set_num`` names either a set or a minifig.
    """

    id: Int
    version: Int
    set_num: str


class InventoryPart(Record):
    """Matches the inventory_parts table row."""

    inventory_id: Int
    part_num: str
    color_id: Int
    quantity: Int
    is_spare: TFBool
    img_url: OptionalUrl


class InventoryMinifig(Record):
    """Matches the inventory_minifigs table row."""

    inventory_id: Int
    fig_num: str
    quantity: Int


class InventorySet(Record):
    """Matches the inventory_sets table row."""

    inventory_id: Int
    set_num: str
    quantity: Int
