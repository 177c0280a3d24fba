"""KSUID codec: 27 base62 characters over 160 bits."""

from typing import Optional

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.encoding import char_map, int_to_text, text_to_int
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_LOOKUP = char_map(BASE62_ALPHABET)

# 2014-05-13T16:53:20Z
KSUID_EPOCH = 1_400_000_000
KSUID_LENGTH = 27

LAYOUT = Layout(
    20,
    [
        ("timestamp", 32, "seconds since the KSUID epoch (2014-05-13)"),
        ("payload", 128, "random payload"),
    ],
)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.KSUID,
    description="KSUID (K-Sortable Unique Identifier)",
    alphabet=BASE62_ALPHABET,
    canonical_length=KSUID_LENGTH,
    has_timestamp=True,
    sortable=True,
    layout=LAYOUT,
)


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if len(text) != KSUID_LENGTH:
        return None
    value = text_to_int(text, _LOOKUP, 62)
    if value is None or value >> 160:
        return None
    return RawId(TypeTag.KSUID, value.to_bytes(20, "big"))


def to_canonical(raw: RawId) -> str:
    return int_to_text(raw.as_int(), BASE62_ALPHABET, KSUID_LENGTH)


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.KSUID,
        components={
            "timestamp_s": f["timestamp"] + KSUID_EPOCH,
            "payload": format(f["payload"], "032x"),
        },
        timestamp=Timestamp.from_seconds(f["timestamp"] + KSUID_EPOCH),
        random_bits=128,
    )


def build_ksuid(unix_seconds: int, payload: bytes) -> RawId:
    data = pack(
        {
            "timestamp": unix_seconds - KSUID_EPOCH,
            "payload": int.from_bytes(payload, "big"),
        },
        LAYOUT,
    )
    return RawId(TypeTag.KSUID, data)


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint="KSUIDs are exactly 27 base62 characters (0-9, A-Z, a-z).",
)
