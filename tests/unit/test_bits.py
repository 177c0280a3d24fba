"""Tests for bit-field packing."""

import pytest

from idforge.bits import Layout, bytes_to_int, int_to_bytes, pack, unpack
from idforge.exceptions import LayoutError

SNOWFLAKE_LIKE = Layout(
    8,
    [
        ("sign", 1, ""),
        ("timestamp", 41, ""),
        ("datacenter", 5, ""),
        ("worker", 5, ""),
        ("sequence", 12, ""),
    ],
)


class TestLayout:
    """Tests for Layout construction."""

    def test_offsets_are_contiguous(self) -> None:
        """Test that offsets accumulate from the MSB."""
        offsets = [(f.name, f.offset) for f in SNOWFLAKE_LIKE]

        assert offsets == [
            ("sign", 0),
            ("timestamp", 1),
            ("datacenter", 42),
            ("worker", 47),
            ("sequence", 52),
        ]

    def test_shift(self) -> None:
        """Test shift counts bits to the right of a field."""
        assert SNOWFLAKE_LIKE.shift("sequence") == 0
        assert SNOWFLAKE_LIKE.shift("worker") == 12
        assert SNOWFLAKE_LIKE.shift("timestamp") == 22

    def test_rejects_wrong_total(self) -> None:
        """Test that widths must cover the whole byte length."""
        with pytest.raises(LayoutError, match="cover 12 bits"):
            Layout(2, [("a", 4, ""), ("b", 8, "")])

    def test_rejects_duplicate_names(self) -> None:
        """Test that field names must be unique."""
        with pytest.raises(LayoutError, match="Duplicate"):
            Layout(1, [("a", 4, ""), ("a", 4, "")])

    def test_rejects_zero_width(self) -> None:
        """Test that widths must be positive."""
        with pytest.raises(LayoutError):
            Layout(1, [("a", 0, ""), ("b", 8, "")])

    def test_contains_and_getitem(self) -> None:
        """Test field lookup by name."""
        assert "worker" in SNOWFLAKE_LIKE
        assert "node" not in SNOWFLAKE_LIKE
        assert SNOWFLAKE_LIKE["worker"].max_value == 31


class TestPackUnpack:
    """Tests for pack() and unpack()."""

    def test_pack_known_value(self) -> None:
        """Test packing non-byte-aligned fields."""
        data = pack(
            {"sign": 0, "timestamp": 1, "datacenter": 1, "worker": 1, "sequence": 1},
            SNOWFLAKE_LIKE,
        )

        expected = (1 << 22) | (1 << 17) | (1 << 12) | 1
        assert bytes_to_int(data) == expected
        assert len(data) == 8

    def test_unpack_inverts_pack(self) -> None:
        """Test unpack returns the packed values."""
        values = {
            "sign": 0,
            "timestamp": (1 << 41) - 1,
            "datacenter": 17,
            "worker": 31,
            "sequence": 4095,
        }

        assert unpack(pack(values, SNOWFLAKE_LIKE), SNOWFLAKE_LIKE) == values

    def test_pack_rejects_overflow(self) -> None:
        """Test that a value wider than its field is rejected."""
        values = {"sign": 0, "timestamp": 0, "datacenter": 32, "worker": 0, "sequence": 0}

        with pytest.raises(LayoutError, match="datacenter"):
            pack(values, SNOWFLAKE_LIKE)

    def test_pack_rejects_negative(self) -> None:
        """Test that negative values are rejected."""
        values = {"sign": 0, "timestamp": -1, "datacenter": 0, "worker": 0, "sequence": 0}

        with pytest.raises(LayoutError):
            pack(values, SNOWFLAKE_LIKE)

    def test_pack_rejects_missing_field(self) -> None:
        """Test that every field must be supplied."""
        with pytest.raises(LayoutError, match="Missing value for field 'sequence'"):
            pack({"sign": 0, "timestamp": 0, "datacenter": 0, "worker": 0}, SNOWFLAKE_LIKE)

    def test_unpack_rejects_wrong_length(self) -> None:
        """Test that unpack requires the declared byte length."""
        with pytest.raises(LayoutError):
            unpack(b"\x00" * 7, SNOWFLAKE_LIKE)

    def test_unpack_all_ones(self) -> None:
        """Test unpack is total over an all-ones input."""
        fields = unpack(b"\xff" * 8, SNOWFLAKE_LIKE)

        assert fields["sign"] == 1
        assert fields["sequence"] == 4095


class TestIntConversion:
    """Tests for int_to_bytes() and bytes_to_int()."""

    def test_int_to_bytes_pads(self) -> None:
        """Test left-padding to the requested length."""
        assert int_to_bytes(1, 4) == b"\x00\x00\x00\x01"

    def test_int_to_bytes_overflow(self) -> None:
        """Test that values wider than the length are rejected."""
        with pytest.raises(LayoutError):
            int_to_bytes(256, 1)

    def test_bytes_to_int(self) -> None:
        """Test big-endian interpretation."""
        assert bytes_to_int(b"\x01\x00") == 256
