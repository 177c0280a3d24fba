"""CUID and CUID2 codecs.

Both are text-backed: the raw bytes are the ASCII text.

CUID (v1): ``c`` + timestamp(8) + counter(4) + fingerprint(4) + random(8),
all lowercase base36, 25 characters.

CUID2: 2-32 lowercase base36 characters starting with a letter. The body
is a hash, so nothing beyond its length can be decoded.
"""

from typing import Optional

from idforge.codecs.base import Codec, clean
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE36_CHARS = frozenset(BASE36_ALPHABET)

CUID_LENGTH = 25
CUID_BLOCKS = (
    ("timestamp", 1, 9),
    ("counter", 9, 13),
    ("fingerprint", 13, 17),
    ("random", 17, 25),
)

CUID2_DEFAULT_LENGTH = 24
CUID2_MIN_LENGTH = 2
CUID2_MAX_LENGTH = 32

CUID_DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.CUID,
    description="CUID v1 (collision-resistant ID, deprecated)",
    alphabet=BASE36_ALPHABET,
    canonical_length=CUID_LENGTH,
    has_timestamp=True,
    sortable=True,
)

CUID2_DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.CUID2,
    description="CUID2 (secure collision-resistant ID)",
    alphabet=BASE36_ALPHABET,
    canonical_length=CUID2_DEFAULT_LENGTH,
)


def _is_base36(text: str) -> bool:
    return bool(text) and set(text) <= _BASE36_CHARS


def try_parse_cuid(text: str) -> Optional[RawId]:
    text = clean(text)
    if len(text) != CUID_LENGTH or text[0] != "c" or not _is_base36(text[1:]):
        return None
    return RawId(TypeTag.CUID, text.encode("ascii"))


def try_parse_cuid2(text: str) -> Optional[RawId]:
    text = clean(text)
    if not CUID2_MIN_LENGTH <= len(text) <= CUID2_MAX_LENGTH:
        return None
    if not ("a" <= text[0] <= "z") or not _is_base36(text):
        return None
    return RawId(TypeTag.CUID2, text.encode("ascii"))


def to_canonical(raw: RawId) -> str:
    return raw.data.decode("ascii")


def decode_cuid(raw: RawId) -> DecodedFields:
    text = to_canonical(raw)
    blocks = {name: text[start:end] for name, start, end in CUID_BLOCKS}
    timestamp_ms = int(blocks["timestamp"], 36)
    return DecodedFields(
        tag=TypeTag.CUID,
        components={
            "timestamp_ms": timestamp_ms,
            "counter": int(blocks["counter"], 36),
            "fingerprint": blocks["fingerprint"],
            "random": blocks["random"],
        },
        timestamp=Timestamp.from_millis(timestamp_ms),
    )


def decode_cuid2(raw: RawId) -> DecodedFields:
    return DecodedFields(tag=TypeTag.CUID2, components={"length": len(raw.data)})


CUID_CODEC = Codec(
    descriptor=CUID_DESCRIPTOR,
    try_parse=try_parse_cuid,
    to_canonical=to_canonical,
    decode_fields=decode_cuid,
    mismatch_hint="CUIDs are 25 lowercase base36 characters starting with 'c'.",
)

CUID2_CODEC = Codec(
    descriptor=CUID2_DESCRIPTOR,
    try_parse=try_parse_cuid2,
    to_canonical=to_canonical,
    decode_fields=decode_cuid2,
    detect_guard=lambda text: len(clean(text)) == CUID2_DEFAULT_LENGTH,
    mismatch_hint=(
        "CUID2s are 2-32 lowercase base36 characters (0-9, a-z) starting with a letter."
    ),
)
