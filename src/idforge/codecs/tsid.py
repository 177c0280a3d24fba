"""TSID codec: 13 Crockford base32 characters over 64 bits.

Parsing is case-insensitive and accepts the Crockford aliases ``O`` for
``0`` and ``I``/``L`` for ``1``.
"""

from typing import Optional

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.codecs.ulid import CROCKFORD_ALPHABET, CROCKFORD_LOOKUP
from idforge.encoding import int_to_text, text_to_int
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

TSID_LENGTH = 13

_LOOKUP = dict(CROCKFORD_LOOKUP)
_LOOKUP.update({"O": 0, "o": 0, "I": 1, "i": 1, "L": 1, "l": 1})

LAYOUT = Layout(
    8,
    [
        ("timestamp", 42, "Unix timestamp in milliseconds"),
        ("node", 10, "node identifier"),
        ("counter", 12, "per-millisecond counter"),
    ],
)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.TSID,
    description="TSID (Time-Sorted Unique Identifier)",
    alphabet=CROCKFORD_ALPHABET,
    canonical_length=TSID_LENGTH,
    has_timestamp=True,
    sortable=True,
    case_insensitive=True,
    layout=LAYOUT,
)


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if len(text) != TSID_LENGTH:
        return None
    value = text_to_int(text, _LOOKUP, 32)
    if value is None or value >> 64:
        return None
    return RawId(TypeTag.TSID, value.to_bytes(8, "big"))


def to_canonical(raw: RawId) -> str:
    return int_to_text(raw.as_int(), CROCKFORD_ALPHABET, TSID_LENGTH)


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.TSID,
        components={
            "timestamp_ms": f["timestamp"],
            "node": f["node"],
            "counter": f["counter"],
        },
        timestamp=Timestamp.from_millis(f["timestamp"]),
    )


def build_tsid(timestamp_ms: int, node: int, counter: int) -> RawId:
    data = pack({"timestamp": timestamp_ms, "node": node, "counter": counter}, LAYOUT)
    return RawId(TypeTag.TSID, data)


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint="TSIDs are exactly 13 Crockford base32 characters.",
)
