"""
tests/test_transforms/test_decode.py — Unit tests for the CSV decoder.

Streams are built in memory with the gz_csv fixture; no files are needed.
"""

from __future__ import annotations

import gzip
import io
from types import GeneratorType

import pytest

from rbkdb.catalog import get_table
from rbkdb.errors import DecodeError
from rbkdb.models import Color, PartMaterial, Rgb, Theme
from rbkdb.transforms.decode import iter_records, iter_records_plain, read_records

COLORS = get_table("colors")
THEMES = get_table("themes")
PARTS = get_table("parts")
COLOR_HEADER = ["id", "name", "rgb", "is_trans"]


# ---------------------------------------------------------------------------
# iter_records()
# ---------------------------------------------------------------------------

class TestIterRecords:
    def test_decodes_rows_in_order(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"], ["36", "Trans-Red", "C91A09", "t"]])
        results = list(iter_records(io.BytesIO(data), COLORS))

        assert [type(r) for r in results] == [Color, Color]
        assert results[0].id == 0
        assert results[1].rgb == Rgb(0xC9, 0x1A, 0x09)
        assert results[1].is_trans is True

    def test_is_lazy(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"]])
        results = iter_records(io.BytesIO(data), COLORS)
        assert isinstance(results, GeneratorType)

    def test_single_pass(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"], ["1", "Blue", "0055BF", "f"]])
        results = iter_records(io.BytesIO(data), COLORS)
        assert len(list(results)) == 2
        assert list(results) == []

    def test_bad_row_does_not_stop_decoding(self, gz_csv):
        data = gz_csv(
            COLOR_HEADER,
            [
                ["0", "Black", "05131D", "f"],
                ["1", "Blue", "0055BF", "x"],
                ["2", "Green", "237841", "f"],
            ],
        )
        results = list(iter_records(io.BytesIO(data), COLORS))

        assert isinstance(results[0], Color)
        assert isinstance(results[1], DecodeError)
        assert isinstance(results[2], Color)
        assert results[2].id == 2

    def test_error_identifies_offending_value(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"], ["1", "Blue", "#0055B", "f"]])
        error = list(iter_records(io.BytesIO(data), COLORS))[1]

        assert isinstance(error, DecodeError)
        assert error.table == "colors"
        assert error.row == 2
        assert error.field == "rgb"
        assert error.value == "#0055B"
        assert "colors" in str(error) and "rgb" in str(error)

    def test_unknown_column_fails_every_row(self, gz_csv):
        data = gz_csv(
            COLOR_HEADER + ["num_parts"],
            [["0", "Black", "05131D", "f", "10"], ["1", "Blue", "0055BF", "f", "3"]],
        )
        results = list(iter_records(io.BytesIO(data), COLORS))

        assert len(results) == 2
        for result in results:
            assert isinstance(result, DecodeError)
            assert result.field == "num_parts"

    def test_repeated_header_column_fails_every_row(self, gz_csv):
        data = gz_csv(
            COLOR_HEADER + ["id"],
            [["0", "Black", "05131D", "f", "7"], ["1", "Blue", "0055BF", "f", "1"]],
        )
        results = list(iter_records(io.BytesIO(data), COLORS))

        assert len(results) == 2
        for result in results:
            assert isinstance(result, DecodeError)
            assert result.field == "id"
            assert "more than once" in result.message

    def test_repeated_header_column_in_read_records(self, gz_csv):
        data = gz_csv(["id", "name", "name", "parent_id"], [["1", "Technic", "Technic", ""]])
        with pytest.raises(DecodeError, match="name"):
            read_records(io.BytesIO(data), THEMES)

    @pytest.mark.parametrize("bad_id", ["1.0", " 1 ", "1_000", "99999999999999999999"])
    def test_non_canonical_integer_fails(self, gz_csv, bad_id):
        data = gz_csv(COLOR_HEADER, [[bad_id, "Blue", "0055BF", "f"]])
        (result,) = list(iter_records(io.BytesIO(data), COLORS))

        assert isinstance(result, DecodeError)
        assert result.field == "id"
        assert result.value == bad_id

    def test_missing_column_fails(self, gz_csv):
        data = gz_csv(["id", "name", "rgb"], [["0", "Black", "05131D"]])
        (result,) = list(iter_records(io.BytesIO(data), COLORS))

        assert isinstance(result, DecodeError)
        assert result.field == "is_trans"
        assert result.value is None

    def test_row_longer_than_header(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f", "extra"]])
        (result,) = list(iter_records(io.BytesIO(data), COLORS))

        assert isinstance(result, DecodeError)
        assert "more values" in result.message
        assert result.value == ["extra"]

    def test_row_shorter_than_header(self, gz_csv):
        data = gz_csv(["id", "name", "parent_id"], [["1", "Technic"]])
        (result,) = list(iter_records(io.BytesIO(data), THEMES))

        assert isinstance(result, DecodeError)
        assert "fewer values" in result.message
        assert result.field == "parent_id"

    def test_quoted_values_with_commas(self, gz_csv):
        data = gz_csv(
            ["part_num", "name", "part_cat_id", "part_material"],
            [["3001pr0001", 'Brick 2 x 4, with "Print"', "11", "Cardboard/Paper"]],
        )
        (part,) = list(iter_records(io.BytesIO(data), PARTS))

        assert part.name == 'Brick 2 x 4, with "Print"'
        assert part.part_material is PartMaterial.CARDBOARD_PAPER

    def test_header_only_yields_nothing(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [])
        assert list(iter_records(io.BytesIO(data), COLORS)) == []

    def test_forward_parent_reference_is_decoded(self, gz_csv):
        data = gz_csv(["id", "name", "parent_id"], [["3", "Competition", "5"], ["5", "Model", ""]])
        results = list(iter_records(io.BytesIO(data), THEMES))

        assert results == [
            Theme(id=3, name="Competition", parent_id=5),
            Theme(id=5, name="Model", parent_id=None),
        ]

    def test_corrupt_gzip_raises(self):
        with pytest.raises(DecodeError, match="unreadable input"):
            list(iter_records(io.BytesIO(b"not gzip at all"), COLORS))

    def test_truncated_gzip_raises(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"]] * 200)
        with pytest.raises(DecodeError, match="unreadable input"):
            list(iter_records(io.BytesIO(data[: len(data) // 2]), COLORS))

    def test_does_not_close_caller_stream(self, gz_csv):
        stream = io.BytesIO(gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"]]))
        list(iter_records(stream, COLORS))
        assert not stream.closed


class TestIterRecordsPlain:
    def test_uncompressed_stream(self):
        text = "id,name,rgb,is_trans\n0,Black,05131D,f\n"
        (color,) = list(iter_records_plain(io.BytesIO(text.encode()), COLORS))
        assert color.name == "Black"

    def test_invalid_utf8_raises(self):
        data = b"id,name,rgb,is_trans\n0,\xff\xfe,05131D,f\n"
        with pytest.raises(DecodeError, match="unreadable input"):
            list(iter_records_plain(io.BytesIO(data), COLORS))


# ---------------------------------------------------------------------------
# read_records()
# ---------------------------------------------------------------------------

class TestReadRecords:
    def test_materializes_all_rows(self, gz_csv):
        data = gz_csv(COLOR_HEADER, [["0", "Black", "05131D", "f"], ["1", "Blue", "0055BF", "f"]])
        colors = read_records(io.BytesIO(data), COLORS)
        assert [c.id for c in colors] == [0, 1]

    def test_raises_first_error(self, gz_csv):
        data = gz_csv(
            COLOR_HEADER,
            [["0", "Black", "05131D", "f"], ["1", "Blue", "0055BF", "no"], ["2", "Green", "zz", "f"]],
        )
        with pytest.raises(DecodeError) as exc_info:
            read_records(io.BytesIO(data), COLORS)

        assert exc_info.value.row == 2
        assert exc_info.value.field == "is_trans"

    def test_reads_real_gzip_file(self, tmp_path, sample_tables):
        header, rows = sample_tables["themes"]
        path = tmp_path / "themes.csv.gz"
        with gzip.open(path, "wt", encoding="utf-8", newline="") as f:
            f.write(",".join(header) + "\n")
            for row in rows:
                f.write(",".join(row) + "\n")

        with open(path, "rb") as f:
            themes = read_records(f, THEMES)

        assert [t.id for t in themes] == [3, 5, 1, 18, 158]
