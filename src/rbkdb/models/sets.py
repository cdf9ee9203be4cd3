"""
models/sets.py — Pydantic models for themes, sets and minifigs.
"""

from __future__ import annotations

from rbkdb.models.base import Record
from rbkdb.models.types import Int, OptionalInt, OptionalUrl


class Theme(Record):
    """Matches the themes table row.

    ``parent_id`` references another theme, which may appear later in the
    CSV than this row.
    """

    id: Int
    name: str
    parent_id: OptionalInt


class Set(Record):
    """Matches the sets table row."""

    set_num: str
    name: str
    year: Int
    theme_id: Int
    num_parts: Int
    img_url: OptionalUrl


class Minifig(Record):
    """Matches the minifigs table row."""

    fig_num: str
    name: str
    num_parts: Int
    img_url: OptionalUrl
