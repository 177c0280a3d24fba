"""
Multi-base encoding engine.

Eight bidirectional transforms between raw identifier bytes and text:
hex, base32 (RFC 4648, unpadded), base58 (Bitcoin alphabet), base64,
base64url, bits, int (arbitrary-precision decimal) and bytes (spaced
octets). The conversions are implemented here on Python integers rather
than delegated to ``base64``/``binascii`` so every alphabet shares one
well-tested bit-shuffling path.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Optional

from idforge.exceptions import DecodeError, EncodeError

HEX_ALPHABET = "0123456789abcdef"
BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
BASE64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


class EncodingFormat(enum.Enum):
    """General-purpose text encodings of identifier bytes."""

    HEX = "hex"
    BASE32 = "base32"
    BASE58 = "base58"
    BASE64 = "base64"
    BASE64URL = "base64url"
    BITS = "bits"
    INT = "int"
    BYTES = "bytes"

    def __str__(self) -> str:
        return self.value

    @property
    def case_sensitive(self) -> bool:
        """Whether upper/lower-casing the output would change its meaning."""
        return self in _CASE_SENSITIVE

    @classmethod
    def parse(cls, name: str) -> EncodingFormat:
        """Resolve an encoding name or alias.

        Raises:
            EncodeError: If the name is not recognized
        """
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise EncodeError(
                f"Unknown encoding format: '{name}'. "
                f"Available: {', '.join(f.value for f in cls)}"
            ) from None


class Case(enum.Enum):
    """Case post-processing for case-insensitive encodings."""

    UPPER = "upper"
    LOWER = "lower"


_CASE_SENSITIVE = frozenset(
    {EncodingFormat.BASE58, EncodingFormat.BASE64, EncodingFormat.BASE64URL}
)

_ALIASES = {
    "hexadecimal": "hex",
    "b32": "base32",
    "b58": "base58",
    "b64": "base64",
    "base64-url": "base64url",
    "b64url": "base64url",
    "bin": "bits",
    "binary": "bits",
    "integer": "int",
    "decimal": "int",
    "octets": "bytes",
}


# ---------------------------------------------------------------------------
# Integer <-> alphabet helpers (also used by the format codecs)
# ---------------------------------------------------------------------------


def char_map(alphabet: str, case_insensitive: bool = False) -> dict[str, int]:
    """Build a character -> digit lookup for ``alphabet``."""
    mapping = {ch: i for i, ch in enumerate(alphabet)}
    if case_insensitive:
        for ch, i in list(mapping.items()):
            mapping.setdefault(ch.lower(), i)
            mapping.setdefault(ch.upper(), i)
    return mapping


def int_to_text(value: int, alphabet: str, width: Optional[int] = None) -> str:
    """Render a non-negative integer in ``alphabet`` (MSB first).

    When ``width`` is given the result is left-padded with the zero digit
    and the value must fit in ``width`` digits.
    """
    base = len(alphabet)
    digits: list[str] = []
    while value > 0:
        value, rem = divmod(value, base)
        digits.append(alphabet[rem])
    if width is not None:
        if len(digits) > width:
            raise EncodeError(f"Value needs {len(digits)} digits, width is {width}")
        digits.extend(alphabet[0] * (width - len(digits)))
    elif not digits:
        digits.append(alphabet[0])
    return "".join(reversed(digits))


def text_to_int(text: str, lookup: dict[str, int], base: int) -> Optional[int]:
    """Parse ``text`` as digits of ``base``; None on an unknown character."""
    value = 0
    for ch in text:
        digit = lookup.get(ch)
        if digit is None:
            return None
        value = value * base + digit
    return value


def _bits_to_text(data: bytes, alphabet: str, bits_per_char: int) -> str:
    if not data:
        return ""
    total_bits = len(data) * 8
    n_chars = -(-total_bits // bits_per_char)
    value = int.from_bytes(data, "big") << (n_chars * bits_per_char - total_bits)
    mask = (1 << bits_per_char) - 1
    out = [alphabet[(value >> (bits_per_char * i)) & mask] for i in range(n_chars)]
    return "".join(reversed(out))


def _text_to_bits(
    text: str,
    lookup: dict[str, int],
    bits_per_char: int,
    name: str,
) -> bytes:
    value = 0
    for ch in text:
        digit = lookup.get(ch)
        if digit is None:
            raise DecodeError(name, f"invalid character {ch!r}")
        value = (value << bits_per_char) | digit
    total_bits = len(text) * bits_per_char
    n_bytes = total_bits // 8
    pad = total_bits - n_bytes * 8
    if pad >= bits_per_char:
        raise DecodeError(name, "final group does not encode whole bytes")
    if value & ((1 << pad) - 1):
        raise DecodeError(name, "non-zero trailing bits")
    return (value >> pad).to_bytes(n_bytes, "big")


# ---------------------------------------------------------------------------
# hex
# ---------------------------------------------------------------------------

_HEX_LOOKUP = char_map(HEX_ALPHABET, case_insensitive=True)


def encode_hex(data: bytes) -> str:
    return "".join(HEX_ALPHABET[b >> 4] + HEX_ALPHABET[b & 0x0F] for b in data)


def decode_hex(text: str) -> bytes:
    if len(text) % 2:
        raise DecodeError("hex", "odd number of digits")
    out = bytearray()
    for i in range(0, len(text), 2):
        hi = _HEX_LOOKUP.get(text[i])
        lo = _HEX_LOOKUP.get(text[i + 1])
        if hi is None or lo is None:
            bad = text[i] if hi is None else text[i + 1]
            raise DecodeError("hex", f"invalid character {bad!r}")
        out.append((hi << 4) | lo)
    return bytes(out)


# ---------------------------------------------------------------------------
# base32 (RFC 4648, unpadded)
# ---------------------------------------------------------------------------

_BASE32_LOOKUP = char_map(BASE32_ALPHABET, case_insensitive=True)


def encode_base32(data: bytes) -> str:
    return _bits_to_text(data, BASE32_ALPHABET, 5)


def decode_base32(text: str) -> bytes:
    if len(text) % 8 in (1, 3, 6):
        raise DecodeError("base32", "final group does not encode whole bytes")
    return _text_to_bits(text, _BASE32_LOOKUP, 5, "base32")


# ---------------------------------------------------------------------------
# base58 (Bitcoin alphabet, leading zero bytes preserved)
# ---------------------------------------------------------------------------

_BASE58_LOOKUP = char_map(BASE58_ALPHABET)


def encode_base58(data: bytes) -> str:
    zeros = len(data) - len(data.lstrip(b"\x00"))
    value = int.from_bytes(data, "big")
    body = int_to_text(value, BASE58_ALPHABET) if value else ""
    return BASE58_ALPHABET[0] * zeros + body


def decode_base58(text: str) -> bytes:
    zeros = len(text) - len(text.lstrip(BASE58_ALPHABET[0]))
    value = text_to_int(text[zeros:], _BASE58_LOOKUP, 58)
    if value is None:
        bad = next(ch for ch in text if ch not in _BASE58_LOOKUP)
        raise DecodeError("base58", f"invalid character {bad!r}")
    body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
    return b"\x00" * zeros + body


# ---------------------------------------------------------------------------
# base64 / base64url
# ---------------------------------------------------------------------------

_BASE64_LOOKUP = char_map(BASE64_ALPHABET)
_BASE64URL_LOOKUP = char_map(BASE64URL_ALPHABET)


def encode_base64(data: bytes) -> str:
    text = _bits_to_text(data, BASE64_ALPHABET, 6)
    return text + "=" * (-len(text) % 4)


def decode_base64(text: str) -> bytes:
    if len(text) % 4:
        raise DecodeError("base64", "length must be a multiple of 4")
    body = text.rstrip("=")
    padding = len(text) - len(body)
    if padding > 2 or "=" in body:
        raise DecodeError("base64", "misplaced padding")
    if len(body) % 4 == 1:
        raise DecodeError("base64", "final group does not encode whole bytes")
    if padding != -len(body) % 4:
        raise DecodeError("base64", "inconsistent padding")
    return _text_to_bits(body, _BASE64_LOOKUP, 6, "base64")


def encode_base64url(data: bytes) -> str:
    return _bits_to_text(data, BASE64URL_ALPHABET, 6)


def decode_base64url(text: str) -> bytes:
    if "=" in text:
        raise DecodeError("base64url", "padding is not allowed")
    if len(text) % 4 == 1:
        raise DecodeError("base64url", "final group does not encode whole bytes")
    return _text_to_bits(text, _BASE64URL_LOOKUP, 6, "base64url")


# ---------------------------------------------------------------------------
# bits / int / bytes
# ---------------------------------------------------------------------------


def encode_bits(data: bytes) -> str:
    return "".join(format(b, "08b") for b in data)


def decode_bits(text: str) -> bytes:
    if len(text) % 8:
        raise DecodeError("bits", "length must be a multiple of 8")
    if text.strip("01"):
        bad = next(ch for ch in text if ch not in "01")
        raise DecodeError("bits", f"invalid character {bad!r}")
    return bytes(int(text[i : i + 8], 2) for i in range(0, len(text), 8))


def encode_int(data: bytes) -> str:
    return str(int.from_bytes(data, "big"))


def decode_int(text: str, expected_len: Optional[int] = None) -> bytes:
    if not text or not text.isascii() or not text.isdigit():
        raise DecodeError("int", f"not a non-negative decimal integer: {text!r}")
    value = int(text)
    length = max(1, (value.bit_length() + 7) // 8)
    if expected_len is not None:
        if length > expected_len:
            raise DecodeError("int", f"value does not fit in {expected_len} bytes")
        length = expected_len
    return value.to_bytes(length, "big")


def encode_spaced_bytes(data: bytes) -> str:
    return " ".join(encode_hex(bytes([b])) for b in data)


def decode_spaced_bytes(text: str) -> bytes:
    out = bytearray()
    for octet in text.split():
        if len(octet) != 2:
            raise DecodeError("bytes", f"malformed octet {octet!r}")
        out.extend(decode_hex(octet))
    return bytes(out)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_ENCODERS: dict[EncodingFormat, Callable[[bytes], str]] = {
    EncodingFormat.HEX: encode_hex,
    EncodingFormat.BASE32: encode_base32,
    EncodingFormat.BASE58: encode_base58,
    EncodingFormat.BASE64: encode_base64,
    EncodingFormat.BASE64URL: encode_base64url,
    EncodingFormat.BITS: encode_bits,
    EncodingFormat.INT: encode_int,
    EncodingFormat.BYTES: encode_spaced_bytes,
}

_DECODERS: dict[EncodingFormat, Callable[[str], bytes]] = {
    EncodingFormat.HEX: decode_hex,
    EncodingFormat.BASE32: decode_base32,
    EncodingFormat.BASE58: decode_base58,
    EncodingFormat.BASE64: decode_base64,
    EncodingFormat.BASE64URL: decode_base64url,
    EncodingFormat.BITS: decode_bits,
    EncodingFormat.BYTES: decode_spaced_bytes,
}


def apply_case(text: str, case: Optional[Case], case_sensitive: bool, name: str) -> str:
    """Apply ``case`` to ``text`` unless the alphabet is case-significant.

    Raises:
        EncodeError: If a case transform is requested for a case-sensitive
            alphabet
    """
    if case is None:
        return text
    if case_sensitive:
        raise EncodeError(
            f"Cannot change case of {name} output: its alphabet is case-sensitive"
        )
    return text.upper() if case is Case.UPPER else text.lower()


def encode_bytes(
    data: bytes,
    fmt: EncodingFormat,
    case: Optional[Case] = None,
) -> str:
    """Encode raw bytes in ``fmt``, optionally case-transformed.

    Args:
        data: Raw identifier bytes
        fmt: Target encoding
        case: Optional upper/lower post-processing

    Returns:
        Encoded text

    Raises:
        EncodeError: If ``case`` is requested for a case-sensitive encoding
    """
    text = _ENCODERS[fmt](data)
    return apply_case(text, case, fmt.case_sensitive, fmt.value)


def decode_text(
    text: str,
    fmt: EncodingFormat,
    expected_len: Optional[int] = None,
) -> bytes:
    """Decode ``text`` from ``fmt`` back into bytes.

    Args:
        text: Encoded text (surrounding whitespace is ignored)
        fmt: Source encoding
        expected_len: Required byte length; ``int`` left-pads to it

    Returns:
        Decoded bytes

    Raises:
        DecodeError: On an invalid alphabet, length or overflow
    """
    text = text.strip()
    if fmt is EncodingFormat.INT:
        return decode_int(text, expected_len)
    data = _DECODERS[fmt](text)
    if expected_len is not None and len(data) != expected_len:
        raise DecodeError(
            fmt.value, f"expected {expected_len} bytes, got {len(data)}"
        )
    return data
