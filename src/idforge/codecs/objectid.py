"""MongoDB ObjectId codec: 24 hex characters over 96 bits."""

from typing import Optional

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.encoding import HEX_ALPHABET, decode_hex, encode_hex
from idforge.exceptions import DecodeError
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

OBJECTID_LENGTH = 24

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
    tag=TypeTag.OBJECTID,
    description="MongoDB ObjectId",
    alphabet=HEX_ALPHABET,
    canonical_length=OBJECTID_LENGTH,
    has_timestamp=True,
    sortable=True,
    case_insensitive=True,
    layout=LAYOUT,
)


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if len(text) != OBJECTID_LENGTH:
        return None
    try:
        return RawId(TypeTag.OBJECTID, decode_hex(text))
    except DecodeError:
        return None


def to_canonical(raw: RawId) -> str:
    return encode_hex(raw.data)


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.OBJECTID,
        components={
            "timestamp_s": f["timestamp"],
            "machine": format(f["machine"], "06x"),
            "pid": f["pid"],
            "counter": f["counter"],
        },
        timestamp=Timestamp.from_seconds(f["timestamp"]),
    )


def build_objectid(seconds: int, machine: int, pid: int, counter: int) -> RawId:
    data = pack(
        {"timestamp": seconds, "machine": machine, "pid": pid, "counter": counter},
        LAYOUT,
    )
    return RawId(TypeTag.OBJECTID, data)


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint="ObjectIds are exactly 24 hexadecimal characters.",
)
