"""
models/parts.py — Pydantic models for part_categories, parts,
part_relationships and elements.
"""

from __future__ import annotations

from rbkdb.models.base import Record
from rbkdb.models.types import Int, MaterialField, OptionalInt, RelationTypeField


class PartCategory(Record):
    """Matches the part_categories table row."""

    id: Int
    name: str


class Part(Record):
    """Matches the parts table row."""

    part_num: str
    name: str
    part_cat_id: Int
    part_material: MaterialField


class PartRelationship(Record):
    """Matches the part_relationships table row.

    ``rel_type`` arrives as a one-letter code (P, R, B, M, T, A).
    """

    rel_type: RelationTypeField
    child_part_num: str
    parent_part_num: str


class Element(Record):
    """Matches the elements table row."""

    element_id: str
    part_num: str
    color_id: Int
    design_id: OptionalInt
