"""Tests for the multi-base encoding engine."""

import pytest

from idforge.encoding import (
    Case,
    EncodingFormat,
    decode_base32,
    decode_base58,
    decode_base64,
    decode_base64url,
    decode_bits,
    decode_hex,
    decode_int,
    decode_spaced_bytes,
    decode_text,
    encode_base32,
    encode_base58,
    encode_base64,
    encode_bytes,
    encode_spaced_bytes,
)
from idforge.exceptions import DecodeError, EncodeError

UUID_BYTES = bytes.fromhex("550e8400e29b41d4a716446655440000")


class TestKnownValues:
    """Tests against published vectors."""

    def test_uuid_cross_encodings(self) -> None:
        """Test the UUID example renders identically in every encoding."""
        assert encode_bytes(UUID_BYTES, EncodingFormat.HEX) == "550e8400e29b41d4a716446655440000"
        assert (
            encode_bytes(UUID_BYTES, EncodingFormat.INT)
            == "113059749145936325402354257176981405696"
        )
        assert encode_bytes(UUID_BYTES, EncodingFormat.BASE64) == "VQ6EAOKbQdSnFkRmVUQAAA=="
        assert encode_bytes(UUID_BYTES, EncodingFormat.BASE64URL) == "VQ6EAOKbQdSnFkRmVUQAAA"

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"f", "MY"),
            (b"fo", "MZXQ"),
            (b"foo", "MZXW6"),
            (b"foob", "MZXW6YQ"),
            (b"fooba", "MZXW6YTB"),
            (b"foobar", "MZXW6YTBOI"),
        ],
    )
    def test_base32_rfc4648(self, data: bytes, expected: str) -> None:
        """Test RFC 4648 base32 vectors (unpadded)."""
        assert encode_base32(data) == expected
        assert decode_base32(expected) == data

    @pytest.mark.parametrize(
        "data,expected",
        [(b"f", "Zg=="), (b"fo", "Zm8="), (b"foo", "Zm9v"), (b"foobar", "Zm9vYmFy")],
    )
    def test_base64_rfc4648(self, data: bytes, expected: str) -> None:
        """Test RFC 4648 base64 vectors."""
        assert encode_base64(data) == expected
        assert decode_base64(expected) == data

    def test_base58_hello_world(self) -> None:
        """Test the Bitcoin base58 alphabet."""
        assert encode_base58(b"hello world") == "StV1DL6CwTryKyV"
        assert decode_base58("StV1DL6CwTryKyV") == b"hello world"

    def test_spaced_bytes(self) -> None:
        """Test space-separated octets."""
        assert encode_spaced_bytes(b"\xde\xad") == "de ad"
        assert decode_spaced_bytes("DE \t  ad\n") == b"\xde\xad"


class TestRoundTrip:
    """Tests that decode(encode(x)) == x."""

    @pytest.mark.parametrize("fmt", list(EncodingFormat))
    @pytest.mark.parametrize("length", [8, 12, 16, 20, 25])
    @pytest.mark.parametrize("fill", [0x00, 0xFF])
    def test_constant_arrays(self, fmt: EncodingFormat, length: int, fill: int) -> None:
        """Test all-zero and all-one arrays at every fixed ID length."""
        data = bytes([fill]) * length

        assert decode_text(encode_bytes(data, fmt), fmt, length) == data

    def test_mixed_bytes(self) -> None:
        """Test a non-trivial value through every encoding."""
        for fmt in EncodingFormat:
            assert decode_text(encode_bytes(UUID_BYTES, fmt), fmt, 16) == UUID_BYTES


class TestBase58Zeros:
    """Tests for base58 leading-zero preservation."""

    def test_leading_zero_bytes_become_ones(self) -> None:
        """Test each leading zero byte maps to one '1'."""
        assert encode_base58(b"\x00\x00\x01") == "112"

    def test_ones_become_leading_zero_bytes(self) -> None:
        """Test each leading '1' maps back to one zero byte."""
        assert decode_base58("112") == b"\x00\x00\x01"

    def test_all_zero(self) -> None:
        """Test an all-zero array is all '1's."""
        assert encode_base58(bytes(4)) == "1111"
        assert decode_base58("1111") == bytes(4)


class TestDecodeErrors:
    """Tests for rejected inputs."""

    def test_hex_odd_length(self) -> None:
        """Test odd-length hex is rejected."""
        with pytest.raises(DecodeError, match="odd"):
            decode_hex("abc")

    def test_hex_invalid_character(self) -> None:
        """Test non-hex characters are rejected."""
        with pytest.raises(DecodeError, match="'g'"):
            decode_hex("0g")

    def test_hex_mixed_case(self) -> None:
        """Test hex decoding accepts mixed case."""
        assert decode_hex("aBcD") == b"\xab\xcd"

    def test_base32_bad_group(self) -> None:
        """Test a final group of 1 character is rejected."""
        with pytest.raises(DecodeError):
            decode_base32("MZXW6YTBO")

    def test_base32_trailing_bits(self) -> None:
        """Test non-zero trailing bits are rejected."""
        with pytest.raises(DecodeError, match="trailing"):
            decode_base32("MZ")

    def test_base32_case_insensitive(self) -> None:
        """Test base32 decoding ignores case."""
        assert decode_base32("mzxw6ytboi") == b"foobar"

    def test_base64_trailing_bits(self) -> None:
        """Test non-zero trailing bits are rejected."""
        with pytest.raises(DecodeError, match="trailing"):
            decode_base64("Zh==")

    def test_base64_bad_length(self) -> None:
        """Test base64 length must be a multiple of 4."""
        with pytest.raises(DecodeError):
            decode_base64("Zg=")

    def test_base64_misplaced_padding(self) -> None:
        """Test padding in the middle is rejected."""
        with pytest.raises(DecodeError, match="padding"):
            decode_base64("Z=g=")

    def test_base64url_rejects_padding(self) -> None:
        """Test base64url rejects '='."""
        with pytest.raises(DecodeError, match="padding"):
            decode_base64url("Zg==")

    def test_base58_invalid_character(self) -> None:
        """Test characters outside the Bitcoin alphabet are rejected."""
        with pytest.raises(DecodeError, match="'0'"):
            decode_base58("10")

    def test_bits_invalid(self) -> None:
        """Test bits must be 0/1 and a multiple of 8 long."""
        with pytest.raises(DecodeError):
            decode_bits("0101")
        with pytest.raises(DecodeError):
            decode_bits("0101010a")

    def test_int_pads_to_expected_length(self) -> None:
        """Test int decoding left-pads."""
        assert decode_int("1", 4) == b"\x00\x00\x00\x01"

    def test_int_overflow(self) -> None:
        """Test int decoding fails when the value does not fit."""
        with pytest.raises(DecodeError, match="does not fit"):
            decode_int("256", 1)

    def test_int_rejects_sign(self) -> None:
        """Test negative numbers are rejected."""
        with pytest.raises(DecodeError):
            decode_int("-1")

    def test_length_mismatch(self) -> None:
        """Test decode_text enforces the expected byte length."""
        with pytest.raises(DecodeError, match="expected 16 bytes"):
            decode_text("abcd", EncodingFormat.HEX, 16)

    def test_decode_error_is_value_error(self) -> None:
        """Test DecodeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode_hex("zz")


class TestCase:
    """Tests for case post-processing."""

    def test_upper_hex(self) -> None:
        """Test uppercase hex."""
        assert encode_bytes(b"\xab", EncodingFormat.HEX, Case.UPPER) == "AB"

    def test_lower_base32(self) -> None:
        """Test lowercase base32."""
        assert encode_bytes(b"foobar", EncodingFormat.BASE32, Case.LOWER) == "mzxw6ytboi"

    def test_noop_for_bits_and_int(self) -> None:
        """Test case is a no-op for digit-only encodings."""
        assert encode_bytes(b"\x05", EncodingFormat.BITS, Case.UPPER) == "00000101"
        assert encode_bytes(b"\x05", EncodingFormat.INT, Case.LOWER) == "5"

    @pytest.mark.parametrize(
        "fmt", [EncodingFormat.BASE58, EncodingFormat.BASE64, EncodingFormat.BASE64URL]
    )
    def test_rejected_for_case_sensitive_alphabets(self, fmt: EncodingFormat) -> None:
        """Test case changes are refused where they would corrupt the value."""
        with pytest.raises(EncodeError, match="case-sensitive"):
            encode_bytes(UUID_BYTES, fmt, Case.UPPER)


class TestEncodingFormatParse:
    """Tests for EncodingFormat.parse()."""

    def test_aliases(self) -> None:
        """Test aliases resolve."""
        assert EncodingFormat.parse("b64") is EncodingFormat.BASE64
        assert EncodingFormat.parse("Integer") is EncodingFormat.INT

    def test_unknown(self) -> None:
        """Test unknown names raise EncodeError."""
        with pytest.raises(EncodeError, match="Available"):
            EncodingFormat.parse("base85")
