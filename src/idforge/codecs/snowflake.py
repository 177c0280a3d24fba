"""Snowflake codec.

64-bit integers rendered in decimal: sign(1, always 0), timestamp(41, ms
since a configurable epoch), datacenter(5), worker(5), sequence(12).

The epoch is not recoverable from the value itself, so it is a decode
parameter. The default is the Unix epoch.
"""

from typing import Optional, Union

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, clean, layout_fields
from idforge.exceptions import LayoutError
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

TWITTER_EPOCH_MS = 1288834974657
DISCORD_EPOCH_MS = 1420070400000

NAMED_EPOCHS = {
    "unix": 0,
    "twitter": TWITTER_EPOCH_MS,
    "discord": DISCORD_EPOCH_MS,
}

MAX_DIGITS = 19
GUARD_MIN_DIGITS = 15

LAYOUT = Layout(
    8,
    [
        ("sign", 1, "always 0"),
        ("timestamp", 41, "milliseconds since the configured epoch"),
        ("datacenter", 5, "datacenter id (0-31)"),
        ("worker", 5, "worker id (0-31)"),
        ("sequence", 12, "per-millisecond sequence (0-4095)"),
    ],
)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.SNOWFLAKE,
    description="Snowflake ID (Twitter/Discord style 64-bit)",
    alphabet="0123456789",
    canonical_length=None,
    has_timestamp=True,
    sortable=True,
    case_insensitive=True,
    layout=LAYOUT,
)


def resolve_epoch(epoch: Union[int, str, None]) -> int:
    """Resolve an epoch given as milliseconds or a well-known name.

    Raises:
        LayoutError: If the name is unknown or the value is negative
    """
    if epoch is None:
        return 0
    if isinstance(epoch, str):
        key = epoch.strip().lower()
        if key in NAMED_EPOCHS:
            return NAMED_EPOCHS[key]
        if not key.isdigit():
            raise LayoutError(
                f"Unknown Snowflake epoch '{epoch}'. "
                f"Use milliseconds or one of: {', '.join(NAMED_EPOCHS)}"
            )
        epoch = int(key)
    if epoch < 0:
        raise LayoutError(f"Snowflake epoch must be non-negative, got {epoch}")
    return epoch


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if not text or len(text) > MAX_DIGITS or not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if value >> 63:
        return None
    return RawId(TypeTag.SNOWFLAKE, value.to_bytes(8, "big"))


def to_canonical(raw: RawId) -> str:
    return str(raw.as_int())


def detect_guard(text: str) -> bool:
    return GUARD_MIN_DIGITS <= len(clean(text)) <= MAX_DIGITS


def decode_with_epoch(raw: RawId, epoch_ms: int = 0) -> DecodedFields:
    """Decode Snowflake fields against ``epoch_ms``."""
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.SNOWFLAKE,
        components={
            "timestamp_ms": f["timestamp"],
            "epoch_ms": epoch_ms,
            "datacenter_id": f["datacenter"],
            "worker_id": f["worker"],
            "sequence": f["sequence"],
        },
        timestamp=Timestamp.from_millis(f["timestamp"] + epoch_ms),
    )


def decode_fields(raw: RawId) -> DecodedFields:
    return decode_with_epoch(raw)


def build_snowflake(timestamp: int, datacenter: int, worker: int, sequence: int) -> RawId:
    """Pack a Snowflake from epoch-relative milliseconds and its ids."""
    data = pack(
        {
            "sign": 0,
            "timestamp": timestamp,
            "datacenter": datacenter,
            "worker": worker,
            "sequence": sequence,
        },
        LAYOUT,
    )
    return RawId(TypeTag.SNOWFLAKE, data)


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    detect_guard=detect_guard,
    mismatch_hint="Snowflake IDs are decimal integers below 2^63 (at most 19 digits).",
)
