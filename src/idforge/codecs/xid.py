"""XID codec.

20 lowercase base32hex characters (``0-9a-v``): the 96-bit value followed
by 4 zero pad bits. Same field layout as ObjectId.
"""

from typing import Optional

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.encoding import char_map, int_to_text, text_to_int
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

BASE32HEX_ALPHABET = "0123456789abcdefghijklmnopqrstuv"
_LOOKUP = char_map(BASE32HEX_ALPHABET)

XID_LENGTH = 20
_PAD_BITS = XID_LENGTH * 5 - 96

LAYOUT = Layout(
    12,
    [
        ("timestamp", 32, "Unix timestamp in seconds"),
        ("machine", 24, "machine identifier"),
        ("pid", 16, "process identifier"),
        ("counter", 24, "incrementing counter"),
    ],
)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.XID,
    description="XID (globally unique, sortable, 12 bytes)",
    alphabet=BASE32HEX_ALPHABET,
    canonical_length=XID_LENGTH,
    has_timestamp=True,
    sortable=True,
    layout=LAYOUT,
)


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if len(text) != XID_LENGTH:
        return None
    value = text_to_int(text, _LOOKUP, 32)
    if value is None or value & ((1 << _PAD_BITS) - 1):
        return None
    return RawId(TypeTag.XID, (value >> _PAD_BITS).to_bytes(12, "big"))


def to_canonical(raw: RawId) -> str:
    return int_to_text(raw.as_int() << _PAD_BITS, BASE32HEX_ALPHABET, XID_LENGTH)


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.XID,
        components={
            "timestamp_s": f["timestamp"],
            "machine": format(f["machine"], "06x"),
            "pid": f["pid"],
            "counter": f["counter"],
        },
        timestamp=Timestamp.from_seconds(f["timestamp"]),
    )


def build_xid(seconds: int, machine: int, pid: int, counter: int) -> RawId:
    data = pack(
        {"timestamp": seconds, "machine": machine, "pid": pid, "counter": counter},
        LAYOUT,
    )
    return RawId(TypeTag.XID, data)


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint="XIDs are exactly 20 lowercase base32hex characters (0-9, a-v).",
)
