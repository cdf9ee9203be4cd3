"""
models/base.py — common base for all Rebrickable record models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    """One decoded CSV row.

    The schema is closed: unknown columns are rejected, and every declared
    field must be present (no defaults), so a row is either fully valid or
    rejected as a whole.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
