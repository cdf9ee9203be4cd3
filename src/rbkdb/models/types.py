"""
models/types.py — field types for the Rebrickable CSV encodings.

Rebrickable dumps are Postgres COPY output, so:
  - booleans are the single characters 't' / 'f'
  - integers are plain decimal digits (Postgres int4)
  - NULL is the empty string (optional integers and image URLs)
  - colors are 6 hex digits without '#'
  - part materials and relationship kinds are short textual codes

Each encoding is an Annotated type so the record models stay declarative:

    class Color(Record):
        rgb: RgbField
        is_trans: TFBool
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any

from pydantic import AnyUrl, BeforeValidator, PlainSerializer, PlainValidator

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")
_INT_RE = re.compile(r"[+-]?[0-9]+")

# Rebrickable ids and counts are Postgres integer columns.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class Rgb:
    """An 8-bit-per-channel color. Canonical text form is ``#rrggbb``."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 0xFF:
                raise ValueError(f"color channel out of range: {channel}")

    @classmethod
    def parse(cls, text: str) -> "Rgb":
        """Parse ``rrggbb`` or ``#rrggbb`` (any case)."""
        match = _HEX_RE.fullmatch(text)
        if match is None:
            raise ValueError(f"invalid RGB color: {text!r}")
        digits = match.group(1)
        return cls(
            r=int(digits[0:2], 16),
            g=int(digits[2:4], 16),
            b=int(digits[4:6], 16),
        )

    def __str__(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------


class PartRelationType(str, Enum):
    """Kind of link between two parts. Values are the stored codes."""

    PRINT = "print"
    PAIR = "pair"
    SUB_PART = "subpart"
    MOLD = "mold"
    PATTERN = "pattern"
    ALTERNATE = "alternate"

    @classmethod
    def from_code(cls, code: str) -> "PartRelationType":
        try:
            return _RELATION_CODES[code]
        except KeyError:
            raise ValueError(f"unknown part relation type: {code!r}") from None

    @property
    def code(self) -> str:
        return _RELATION_CODES_REVERSE[self]


class PartMaterial(str, Enum):
    """Material a part is made of. Values are the stored codes."""

    CARDBOARD_PAPER = "cardboard/paper"
    CLOTH = "cloth"
    FLEXIBLE_PLASTIC = "flexible plastic"
    FOAM = "foam"
    METAL = "metal"
    PLASTIC = "plastic"
    RUBBER = "rubber"

    @classmethod
    def from_code(cls, code: str) -> "PartMaterial":
        try:
            return _MATERIAL_CODES[code]
        except KeyError:
            raise ValueError(f"unknown part material: {code!r}") from None

    @property
    def code(self) -> str:
        return _MATERIAL_CODES_REVERSE[self]


# Source (CSV) code -> member
_RELATION_CODES: dict[str, PartRelationType] = {
    "P": PartRelationType.PRINT,
    "R": PartRelationType.PAIR,
    "B": PartRelationType.SUB_PART,
    "M": PartRelationType.MOLD,
    "T": PartRelationType.PATTERN,
    "A": PartRelationType.ALTERNATE,
}
_RELATION_CODES_REVERSE = {v: k for k, v in _RELATION_CODES.items()}

_MATERIAL_CODES: dict[str, PartMaterial] = {
    "Cardboard/Paper": PartMaterial.CARDBOARD_PAPER,
    "Cloth": PartMaterial.CLOTH,
    "Flexible Plastic": PartMaterial.FLEXIBLE_PLASTIC,
    "Foam": PartMaterial.FOAM,
    "Metal": PartMaterial.METAL,
    "Plastic": PartMaterial.PLASTIC,
    "Rubber": PartMaterial.RUBBER,
}
_MATERIAL_CODES_REVERSE = {v: k for k, v in _MATERIAL_CODES.items()}


# ---------------------------------------------------------------------------
# Before-validators
# ---------------------------------------------------------------------------


def parse_tf_bool(value: Any) -> Any:
    """'t' -> True, 'f' -> False; anything else is rejected."""
    if isinstance(value, bool):
        return value
    if value == "t":
        return True
    if value == "f":
        return False
    raise ValueError("expected 't' or 'f'")


def parse_int(value: Any) -> Any:
    """Accept an optional sign and ASCII digits only, within 32-bit range."""
    if isinstance(value, bool):
        raise ValueError("expected an integer")
    if isinstance(value, str):
        if _INT_RE.fullmatch(value) is None:
            raise ValueError(f"invalid integer: {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        raise ValueError("expected an integer")
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"integer out of 32-bit range: {value}")
    return value


def parse_optional_int(value: Any) -> Any:
    if value == "" or value is None:
        return None
    return parse_int(value)


def empty_to_none(value: Any) -> Any:
    if value == "":
        return None
    return value


def parse_rgb(value: Any) -> Any:
    if isinstance(value, Rgb):
        return value
    if not isinstance(value, str):
        raise ValueError("expected a hex color string")
    return Rgb.parse(value)


def _enum_parser(enum_cls: type[PartRelationType] | type[PartMaterial]):
    def parse(value: Any) -> Any:
        if isinstance(value, enum_cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"expected a {enum_cls.__name__} code")
        return enum_cls.from_code(value)

    return parse


# ---------------------------------------------------------------------------
# Annotated field types
# ---------------------------------------------------------------------------

TFBool = Annotated[bool, BeforeValidator(parse_tf_bool)]
Int = Annotated[int, BeforeValidator(parse_int)]
OptionalInt = Annotated[int | None, BeforeValidator(parse_optional_int)]
OptionalUrl = Annotated[
    AnyUrl | None,
    BeforeValidator(empty_to_none),
    PlainSerializer(lambda v: str(v) if v is not None else None, return_type=str | None),
]
RgbField = Annotated[
    Rgb,
    PlainValidator(parse_rgb),
    PlainSerializer(str, return_type=str),
]
RelationTypeField = Annotated[
    PartRelationType, BeforeValidator(_enum_parser(PartRelationType))
]
MaterialField = Annotated[PartMaterial, BeforeValidator(_enum_parser(PartMaterial))]
