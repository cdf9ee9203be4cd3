"""
rbkdb.models — Pydantic models matching each Rebrickable table.

Every model rejects unknown fields and decodes the Rebrickable text
encodings (t/f booleans, empty-string NULLs, hex colors, material and
relationship codes). See rbkdb.models.types.
"""

from rbkdb.models.base import Record
from rbkdb.models.colors import Color
from rbkdb.models.inventories import Inventory, InventoryMinifig, InventoryPart, InventorySet
from rbkdb.models.parts import Element, Part, PartCategory, PartRelationship
from rbkdb.models.sets import Minifig, Set, Theme
from rbkdb.models.types import PartMaterial, PartRelationType, Rgb

__all__ = [
    "Record",
    "Color",
    "PartCategory",
    "Part",
    "PartRelationship",
    "Element",
    "Minifig",
    "Theme",
    "Set",
    "Inventory",
    "InventoryPart",
    "InventoryMinifig",
    "InventorySet",
    "Rgb",
    "PartMaterial",
    "PartRelationType",
]
