"""
models/colors.py — Pydantic model for the colors table.
"""

from __future__ import annotations

from rbkdb.models.base import Record
from rbkdb.models.types import Int, RgbField, TFBool


class Color(Record):
    """Matches colors.csv.gz / the colors table row."""

    id: Int
    name: str
    rgb: RgbField
    is_trans: TFBool
