"""
transforms/decode.py — stream a Rebrickable .csv.gz file into records.

The first CSV row is the header; every following row is validated against
the table's record model. Decoding is lazy and single-pass: the iterator
yields one element per data row, either the decoded Record or the
DecodeError describing why that row was rejected, and carries on with
the next row either way. Callers that want all-or-nothing semantics use
read_records(), which stops at the first error.

Usage:
    from rbkdb.catalog import get_table
    from rbkdb.transforms.decode import iter_records, read_records

    with open("themes.csv.gz", "rb") as f:
        for result in iter_records(f, get_table("themes")):
            if isinstance(result, DecodeError):
                ...

    with open("themes.csv.gz", "rb") as f:
        themes = read_records(f, get_table("themes"))
"""

from __future__ import annotations

import csv
import gzip
import io
import zlib
from collections.abc import Iterator, Sequence
from typing import IO

import structlog
from pydantic import ValidationError

from rbkdb.catalog import TableSpec
from rbkdb.errors import DecodeError
from rbkdb.models import Record

log = structlog.get_logger(__name__)

# csv.DictReader key for values beyond the header width. It is never a
# model field, so such rows fail the closed-schema check.
_EXTRA_KEY = "__extra_values__"


def iter_records(stream: IO[bytes], table: TableSpec) -> Iterator[Record | DecodeError]:
    """Decode a gzip-compressed CSV byte stream, one result per data row."""
    with gzip.GzipFile(fileobj=stream, mode="rb") as gz:
        yield from iter_records_plain(gz, table)


def iter_records_plain(
    stream: IO[bytes], table: TableSpec
) -> Iterator[Record | DecodeError]:
    """Decode an uncompressed CSV byte stream, one result per data row."""
    text = io.TextIOWrapper(stream, encoding="utf-8", newline="")
    reader = csv.DictReader(text, restkey=_EXTRA_KEY)
    row_num = 0
    repeated: str | None = None
    try:
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except (OSError, EOFError, zlib.error, UnicodeDecodeError, csv.Error) as exc:
                # The stream itself is broken; nothing after this point can be read.
                raise DecodeError(
                    table.name, f"unreadable input after row {row_num}: {exc}"
                ) from exc
            row_num += 1
            if row_num == 1:
                repeated = _repeated_column(reader.fieldnames or [])
            if repeated is not None:
                # DictReader keeps only the last value of a repeated column.
                yield DecodeError(
                    table.name,
                    "column appears more than once in the header",
                    row=row_num,
                    field=repeated,
                    value=row[repeated],
                )
                continue
            yield decode_row(row, table, row_num)
    finally:
        # Leave the caller's stream open.
        text.detach()


def _repeated_column(fieldnames: Sequence[str]) -> str | None:
    seen: set[str] = set()
    for name in fieldnames:
        if name in seen:
            return name
        seen.add(name)
    return None


def decode_row(
    row: dict[str, object], table: TableSpec, row_num: int
) -> Record | DecodeError:
    """Validate one csv.DictReader row against the table's model."""
    if _EXTRA_KEY in row:
        return DecodeError(
            table.name,
            "row has more values than the header",
            row=row_num,
            field=_EXTRA_KEY,
            value=row[_EXTRA_KEY],
        )
    short = [k for k, v in row.items() if v is None]
    if short:
        return DecodeError(
            table.name,
            "row has fewer values than the header",
            row=row_num,
            field=str(short[0]),
            value=None,
        )

    try:
        return table.model.model_validate(row)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        # For a missing column pydantic reports the whole row as the input.
        value = None if first["type"] == "missing" else first.get("input")
        return DecodeError(table.name, first["msg"], row=row_num, field=field, value=value)


def read_records(stream: IO[bytes], table: TableSpec) -> list[Record]:
    """
    Decode the whole gzip-compressed stream, raising the first DecodeError.

    Returns:
        Records in file order.
    """
    records: list[Record] = []
    for result in iter_records(stream, table):
        if isinstance(result, DecodeError):
            log.error(
                "decode_failed",
                table=table.name,
                row=result.row,
                field=result.field,
                error=result.message,
            )
            raise result
        records.append(result)
    return records
