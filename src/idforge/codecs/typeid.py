"""TypeID codec.

``prefix_suffix`` or a bare ``suffix``. The suffix is 26 lowercase Crockford
characters encoding a 128-bit UUID (normally v7). The prefix is 1-63
lowercase ASCII letters or underscores, starting and ending with a letter,
and travels in ``RawId.prefix`` rather than in the payload bytes.
"""

import re
from typing import Optional

from idforge.codecs.base import Codec, clean, layout_fields
from idforge.codecs.ulid import CROCKFORD_ALPHABET, format_crockford128, parse_crockford128
from idforge.codecs.uuid import V7_LAYOUT, format_uuid, variant_of, version_of
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

SUFFIX_LENGTH = 26
MAX_PREFIX_LENGTH = 63

_PREFIX_RE = re.compile(r"^[a-z]([a-z_]{0,61}[a-z])?$")
_SUFFIX_CHARS = frozenset(CROCKFORD_ALPHABET.lower())

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.TYPEID,
    description="TypeID (type-prefixed UUIDv7)",
    alphabet=CROCKFORD_ALPHABET.lower() + "_",
    canonical_length=None,
    has_timestamp=True,
    sortable=True,
    layout=V7_LAYOUT,
)


def is_valid_prefix(prefix: str) -> bool:
    """Whether ``prefix`` is a legal TypeID type prefix (empty allowed)."""
    return prefix == "" or bool(_PREFIX_RE.match(prefix))


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    prefix, sep, suffix = text.rpartition("_")
    if sep and not prefix:
        return None
    if not is_valid_prefix(prefix):
        return None
    if len(suffix) != SUFFIX_LENGTH or not set(suffix) <= _SUFFIX_CHARS:
        return None
    data = parse_crockford128(suffix)
    if data is None:
        return None
    return RawId(TypeTag.TYPEID, data, prefix=prefix)


def to_canonical(raw: RawId) -> str:
    suffix = format_crockford128(raw.data).lower()
    return f"{raw.prefix}_{suffix}" if raw.prefix else suffix


def decode_fields(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, DESCRIPTOR)
    return DecodedFields(
        tag=TypeTag.TYPEID,
        components={
            "prefix": raw.prefix,
            "uuid": format_uuid(raw.data),
            "timestamp_ms": f["unix_ts_ms"],
        },
        timestamp=Timestamp.from_millis(f["unix_ts_ms"]),
        version=version_of(raw.data),
        variant=variant_of(raw.data),
    )


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    mismatch_hint=(
        "TypeIDs look like 'prefix_01h455vb4pex5vsknk084sn02q': a lowercase "
        "prefix and 26 lowercase Crockford base32 characters."
    ),
)
