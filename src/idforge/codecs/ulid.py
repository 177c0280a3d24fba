"""ULID codec.

26 Crockford base32 characters encoding 128 bits (48-bit Unix ms timestamp,
80 random bits). The two leading pad bits are always zero, so the first
character is at most ``7``. Canonical text is uppercase; parsing is
case-insensitive.
"""

from typing import Optional

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.encoding import char_map, int_to_text, text_to_int
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
CROCKFORD_LOOKUP = char_map(CROCKFORD_ALPHABET, case_insensitive=True)

ULID_LENGTH = 26

LAYOUT = Layout(
    16,
    [
        ("timestamp", 48, "Unix timestamp in milliseconds"),
        ("randomness", 80, "random bits"),
    ],
)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.ULID,
    description="ULID (Universally Unique Lexicographically Sortable Identifier)",
    alphabet=CROCKFORD_ALPHABET,
    canonical_length=ULID_LENGTH,
    has_timestamp=True,
    sortable=True,
    case_insensitive=True,
    layout=LAYOUT,
)


def parse_crockford128(text: str) -> Optional[bytes]:
    """Decode 26 Crockford characters into 16 bytes, or None.

    Shared with TypeID, whose suffix uses the same 128-bit encoding.
    """
    if len(text) != ULID_LENGTH:
        return None
    value = text_to_int(text, CROCKFORD_LOOKUP, 32)
    if value is None or value >> 128:
        return None
    return value.to_bytes(16, "big")


def format_crockford128(data: bytes) -> str:
    return int_to_text(int.from_bytes(data, "big"), CROCKFORD_ALPHABET, ULID_LENGTH)


def try_parse(text: str) -> Optional[RawId]:
    data = parse_crockford128(clean(text))
    if data is None:
        return None
    return RawId(TypeTag.ULID, data)


def to_canonical(raw: RawId) -> str:
    return format_crockford128(raw.data)


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.ULID,
        components={
            "timestamp_ms": f["timestamp"],
            "randomness": format(f["randomness"], "020x"),
        },
        timestamp=Timestamp.from_millis(f["timestamp"]),
        random_bits=80,
    )


def build_ulid(timestamp_ms: int, randomness: int) -> RawId:
    """Pack a ULID from its timestamp and 80-bit random value."""
    return RawId(
        TypeTag.ULID,
        pack({"timestamp": timestamp_ms, "randomness": randomness}, LAYOUT),
    )


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint=(
        "ULIDs are 26 Crockford base32 characters (0-9, A-Z without I, L, O, U) "
        "and start with 0-7."
    ),
)
