"""Tests for the engine façade."""

import pytest

from idforge import (
    Case,
    DecodeError,
    EncodeError,
    EncodingFormat,
    StructuralMismatchError,
    TypeTag,
    canonical,
    decode,
    decode_fields,
    encode,
    inspect,
    parse,
)

UUID_V4 = "550e8400-e29b-41d4-a716-446655440000"
UUID_V7 = "017f22e2-79b0-7cc3-98c4-dc0c0c07398f"
OBJECTID = "507f1f77bcf86cd799439011"
SNOWFLAKE = "1541815603606036480"


class TestEncode:
    """Tests for encode()."""

    def test_int(self) -> None:
        """Test integer rendering of a UUID."""
        assert encode(parse(UUID_V4), "int") == "113059749145936325402354257176981405696"

    def test_enum_and_name(self) -> None:
        """Test encodings may be given as enum members or names."""
        raw = parse(UUID_V4)

        assert encode(raw, EncodingFormat.BASE64) == encode(raw, "b64")

    def test_canonical(self) -> None:
        """Test 'canonical' renders the format's own text."""
        assert encode(parse(OBJECTID), "canonical") == OBJECTID

    def test_canonical_upper(self) -> None:
        """Test case applies to case-insensitive canonical forms."""
        assert encode(parse(UUID_V4), "canonical", "upper") == UUID_V4.upper()
        assert encode(parse(OBJECTID), "canonical", Case.UPPER) == OBJECTID.upper()

    def test_canonical_case_sensitive(self) -> None:
        """Test case changes are refused for case-sensitive canonical forms."""
        raw = parse("0ujtsYcgvSTl8PAuAdqWYSMnLOv")

        with pytest.raises(EncodeError, match="ksuid"):
            encode(raw, "canonical", "lower")

    def test_unknown_case(self) -> None:
        """Test unknown case names are rejected."""
        with pytest.raises(EncodeError, match="upper"):
            encode(parse(UUID_V4), "hex", "title")

    def test_unknown_encoding(self) -> None:
        """Test unknown encodings are rejected."""
        with pytest.raises(EncodeError):
            encode(parse(UUID_V4), "base85")


class TestDecode:
    """Tests for decode()."""

    def test_base64_uuid_is_reclassified(self) -> None:
        """Test decoding under 'uuid' yields the specific version."""
        raw = decode("VQ6EAOKbQdSnFkRmVUQAAA==", "base64", "uuid")

        assert raw.tag is TypeTag.UUID_V4
        assert canonical(raw) == UUID_V4

    def test_wrong_uuid_version(self) -> None:
        """Test a specific UUID tag must match the decoded version."""
        with pytest.raises(StructuralMismatchError, match="uuidv4"):
            decode("VQ6EAOKbQdSnFkRmVUQAAA==", "base64", "uuidv7")

    def test_int_objectid(self) -> None:
        """Test an ObjectId survives an integer round trip."""
        raw = parse(OBJECTID)

        assert decode(encode(raw, "int"), "int", "objectid") == raw

    def test_wrong_length(self) -> None:
        """Test byte length must match the type."""
        with pytest.raises(DecodeError, match="expected 12 bytes"):
            decode("abcd", "hex", "objectid")

    def test_invalid_text_backed_bytes(self) -> None:
        """Test bytes that do not form valid CUID text are rejected."""
        with pytest.raises(StructuralMismatchError):
            decode("00" * 25, "hex", "cuid")

    def test_typeid_prefix(self) -> None:
        """Test the TypeID prefix is attached after decoding."""
        raw = decode(UUID_V7.replace("-", ""), "hex", "typeid", prefix="user")

        assert canonical(raw) == "user_01fwhe4ydgfk1shh6w1g60eecf"

    def test_canonical(self) -> None:
        """Test 'canonical' parses with the type as a hint."""
        assert decode(UUID_V4.upper(), "canonical", "uuid").tag is TypeTag.UUID_V4


class TestDecodeFields:
    """Tests for decode_fields()."""

    def test_snowflake_epoch(self) -> None:
        """Test the Snowflake epoch is applied."""
        decoded = decode_fields(parse(SNOWFLAKE), epoch="twitter")

        assert decoded.timestamp.to_iso8601() == "2022-06-28T16:07:40.105Z"

    def test_snowflake_default_epoch(self) -> None:
        """Test Snowflakes decode against the Unix epoch by default."""
        decoded = decode_fields(parse(SNOWFLAKE))

        assert decoded["epoch_ms"] == 0

    def test_nil(self) -> None:
        """Test the nil UUID has no fields."""
        assert decode_fields(parse("00000000-0000-0000-0000-000000000000")) is None


class TestInspect:
    """Tests for inspect()."""

    def test_uuid(self) -> None:
        """Test inspection of a v4 UUID."""
        result = inspect(UUID_V4)

        assert result.tag is TypeTag.UUID_V4
        assert result.canonical == UUID_V4
        assert result.fields.version == 4
        assert [e.encoding for e in result.encodings] == [
            "hex",
            "base32",
            "base58",
            "base64",
            "int",
        ]

    def test_to_dict(self) -> None:
        """Test the JSON view of an inspection."""
        data = inspect(UUID_V7).to_dict()

        assert data["id_type"] == "uuidv7"
        assert data["timestamp_iso"] == "2022-02-22T19:22:22.000Z"
        assert data["version"] == 7
        assert data["variant"] == "RFC4122"
        assert data["encodings"]["hex"] == UUID_V7.replace("-", "")
        assert "type" not in data

    def test_snowflake_epoch(self) -> None:
        """Test inspection with a Snowflake epoch."""
        data = inspect(SNOWFLAKE, epoch="twitter").to_dict()

        assert data["timestamp_iso"] == "2022-06-28T16:07:40.105Z"
        assert data["components"]["epoch_ms"] == 1288834974657
