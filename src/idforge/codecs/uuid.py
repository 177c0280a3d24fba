"""UUID codecs: versions 1, 3, 4, 5, 6, 7, nil, max and the generic family tag.

Canonical form: 8-4-4-4-12 lowercase hex. Parsers accept the dashed form or
32 undashed hex digits in any case; auto-detection only admits the dashed
form (undashed text is too easily something else).

Version nibble: high 4 bits of byte 6. Variant: high bits of byte 8, with
``10`` marking RFC 4122 / RFC 9562 UUIDs.
"""

import hashlib
from typing import Optional, Union

from idforge.bits import Layout, pack
from idforge.codecs.base import Codec, FieldDecoder, Parser, clean, layout_fields
from idforge.encoding import HEX_ALPHABET, decode_hex, encode_hex
from idforge.exceptions import DecodeError, StructuralMismatchError
from idforge.models import DecodedFields, FormatDescriptor, RawId, Timestamp, TypeTag

# 100-ns intervals between 1582-10-15 (Gregorian reform) and 1970-01-01
GREGORIAN_OFFSET = 0x01B21DD213814000

NIL_BYTES = bytes(16)
MAX_BYTES = b"\xff" * 16

NAMESPACES = {
    "dns": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
    "url": "6ba7b811-9dad-11d1-80b4-00c04fd430c8",
    "oid": "6ba7b812-9dad-11d1-80b4-00c04fd430c8",
    "x500": "6ba7b814-9dad-11d1-80b4-00c04fd430c8",
}

V1_LAYOUT = Layout(
    16,
    [
        ("time_low", 32, "low 32 bits of the 60-bit Gregorian timestamp"),
        ("time_mid", 16, "middle 16 bits of the timestamp"),
        ("version", 4, "version nibble (1)"),
        ("time_high", 12, "high 12 bits of the timestamp"),
        ("variant", 2, "RFC variant (10)"),
        ("clock_seq", 14, "clock sequence"),
        ("node", 48, "node identifier"),
    ],
)

V6_LAYOUT = Layout(
    16,
    [
        ("time_high", 32, "high 32 bits of the 60-bit Gregorian timestamp"),
        ("time_mid", 16, "middle 16 bits of the timestamp"),
        ("version", 4, "version nibble (6)"),
        ("time_low", 12, "low 12 bits of the timestamp"),
        ("variant", 2, "RFC variant (10)"),
        ("clock_seq", 14, "clock sequence"),
        ("node", 48, "node identifier"),
    ],
)

NAME_LAYOUT = Layout(
    16,
    [
        ("hash_a", 48, "digest bits"),
        ("version", 4, "version nibble (3 or 5)"),
        ("hash_b", 12, "digest bits"),
        ("variant", 2, "RFC variant (10)"),
        ("hash_c", 62, "digest bits"),
    ],
)

V4_LAYOUT = Layout(
    16,
    [
        ("random_a", 48, "random bits"),
        ("version", 4, "version nibble (4)"),
        ("random_b", 12, "random bits"),
        ("variant", 2, "RFC variant (10)"),
        ("random_c", 62, "random bits"),
    ],
)

V7_LAYOUT = Layout(
    16,
    [
        ("unix_ts_ms", 48, "Unix timestamp in milliseconds"),
        ("version", 4, "version nibble (7)"),
        ("rand_a", 12, "random bits"),
        ("variant", 2, "RFC variant (10)"),
        ("rand_b", 62, "random bits"),
    ],
)

GENERIC_LAYOUT = Layout(
    16,
    [
        ("data_a", 48, "opaque bits"),
        ("version", 4, "version nibble"),
        ("data_b", 76, "opaque bits, including the variant"),
    ],
)

CONSTANT_LAYOUT = Layout(16, [("value", 128, "constant value")])

RFC_VERSIONS = {
    1: TypeTag.UUID_V1,
    3: TypeTag.UUID_V3,
    4: TypeTag.UUID_V4,
    5: TypeTag.UUID_V5,
    6: TypeTag.UUID_V6,
    7: TypeTag.UUID_V7,
}


def parse_uuid_bytes(text: str) -> Optional[bytes]:
    """Parse dashed or undashed UUID text into 16 bytes, or None."""
    text = clean(text)
    if len(text) == 36:
        if any(text[i] != "-" for i in (8, 13, 18, 23)):
            return None
        text = text.replace("-", "")
    if len(text) != 32:
        return None
    try:
        return decode_hex(text)
    except DecodeError:
        return None


def format_uuid(data: bytes) -> str:
    """Render 16 bytes in canonical 8-4-4-4-12 form."""
    h = encode_hex(data)
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


def version_of(data: bytes) -> int:
    return data[6] >> 4


def variant_of(data: bytes) -> str:
    """Name of the variant encoded in the high bits of byte 8."""
    octet = data[8]
    if octet & 0x80 == 0:
        return "NCS"
    if octet & 0xC0 == 0x80:
        return "RFC4122"
    if octet & 0xE0 == 0xC0:
        return "Microsoft"
    return "Future"


def classify_uuid(data: bytes) -> TypeTag:
    """Map 16 UUID bytes to the most specific UUID tag."""
    if data == NIL_BYTES:
        return TypeTag.UUID_NIL
    if data == MAX_BYTES:
        return TypeTag.UUID_MAX
    if variant_of(data) == "RFC4122":
        return RFC_VERSIONS.get(version_of(data), TypeTag.UUID)
    return TypeTag.UUID


def _make_parser(tag: TypeTag) -> Parser:
    def try_parse(text: str) -> Optional[RawId]:
        data = parse_uuid_bytes(text)
        if data is None or classify_uuid(data) is not tag:
            return None
        return RawId(tag, data)

    return try_parse


def _canonical(raw: RawId) -> str:
    return format_uuid(raw.data)


def _is_dashed(text: str) -> bool:
    return len(clean(text)) == 36


def _gregorian_timestamp(ticks: int) -> Timestamp:
    return Timestamp((ticks - GREGORIAN_OFFSET) * 100, "100ns")


def _decode_v1(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, V1_DESCRIPTOR)
    ticks = (f["time_high"] << 48) | (f["time_mid"] << 32) | f["time_low"]
    return DecodedFields(
        tag=raw.tag,
        components={
            "timestamp_ticks": ticks,
            "clock_seq": f["clock_seq"],
            "node": format(f["node"], "012x"),
        },
        timestamp=_gregorian_timestamp(ticks),
        version=1,
        variant=variant_of(raw.data),
        random_bits=14,
    )


def _decode_v6(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, V6_DESCRIPTOR)
    ticks = (f["time_high"] << 28) | (f["time_mid"] << 12) | f["time_low"]
    return DecodedFields(
        tag=raw.tag,
        components={
            "timestamp_ticks": ticks,
            "clock_seq": f["clock_seq"],
            "node": format(f["node"], "012x"),
        },
        timestamp=_gregorian_timestamp(ticks),
        version=6,
        variant=variant_of(raw.data),
        random_bits=14,
    )


def _decode_v7(raw: RawId) -> DecodedFields:
    f = layout_fields(raw, V7_DESCRIPTOR)
    return DecodedFields(
        tag=raw.tag,
        components={
            "timestamp_ms": f["unix_ts_ms"],
            "rand_a": f["rand_a"],
            "rand_b": format(f["rand_b"], "016x"),
        },
        timestamp=Timestamp.from_millis(f["unix_ts_ms"]),
        version=7,
        variant=variant_of(raw.data),
        random_bits=74,
    )


def _decode_v4(raw: RawId) -> DecodedFields:
    return DecodedFields(
        tag=raw.tag,
        components={},
        version=4,
        variant=variant_of(raw.data),
        random_bits=122,
    )


def _decode_name_based(raw: RawId) -> DecodedFields:
    version = version_of(raw.data)
    return DecodedFields(
        tag=raw.tag,
        components={"hash": "md5" if version == 3 else "sha1"},
        version=version,
        variant=variant_of(raw.data),
    )


def _decode_generic(raw: RawId) -> DecodedFields:
    return DecodedFields(
        tag=raw.tag,
        components={},
        version=version_of(raw.data),
        variant=variant_of(raw.data),
    )


def _descriptor(
    tag: TypeTag,
    description: str,
    layout: Layout,
    has_timestamp: bool = False,
    sortable: bool = False,
) -> FormatDescriptor:
    return FormatDescriptor(
        tag=tag,
        description=description,
        alphabet=HEX_ALPHABET + "-",
        canonical_length=36,
        has_timestamp=has_timestamp,
        sortable=sortable,
        case_insensitive=True,
        layout=layout,
    )


V1_DESCRIPTOR = _descriptor(
    TypeTag.UUID_V1, "UUID v1 (timestamp + node)", V1_LAYOUT, has_timestamp=True
)
V3_DESCRIPTOR = _descriptor(TypeTag.UUID_V3, "UUID v3 (MD5 namespace hash)", NAME_LAYOUT)
V4_DESCRIPTOR = _descriptor(TypeTag.UUID_V4, "UUID v4 (random)", V4_LAYOUT)
V5_DESCRIPTOR = _descriptor(TypeTag.UUID_V5, "UUID v5 (SHA-1 namespace hash)", NAME_LAYOUT)
V6_DESCRIPTOR = _descriptor(
    TypeTag.UUID_V6,
    "UUID v6 (reordered timestamp)",
    V6_LAYOUT,
    has_timestamp=True,
    sortable=True,
)
V7_DESCRIPTOR = _descriptor(
    TypeTag.UUID_V7,
    "UUID v7 (Unix timestamp + random)",
    V7_LAYOUT,
    has_timestamp=True,
    sortable=True,
)
NIL_DESCRIPTOR = _descriptor(TypeTag.UUID_NIL, "Nil UUID (all zeros)", CONSTANT_LAYOUT)
MAX_DESCRIPTOR = _descriptor(TypeTag.UUID_MAX, "Max UUID (all ones)", CONSTANT_LAYOUT)
GENERIC_DESCRIPTOR = _descriptor(
    TypeTag.UUID, "UUID (other version or variant)", GENERIC_LAYOUT
)

_UNDASHED_HINT = "Looks like a UUID without dashes. Use the 8-4-4-4-12 form."


def _codec(descriptor: FormatDescriptor, decoder: Optional[FieldDecoder]) -> Codec:
    return Codec(
        descriptor=descriptor,
        try_parse=_make_parser(descriptor.tag),
        to_canonical=_canonical,
        decode_fields=decoder,
        detect_guard=_is_dashed,
        mismatch_hint=_UNDASHED_HINT,
    )


CODECS = [
    _codec(V1_DESCRIPTOR, _decode_v1),
    _codec(V3_DESCRIPTOR, _decode_name_based),
    _codec(V4_DESCRIPTOR, _decode_v4),
    _codec(V5_DESCRIPTOR, _decode_name_based),
    _codec(V6_DESCRIPTOR, _decode_v6),
    _codec(V7_DESCRIPTOR, _decode_v7),
    _codec(NIL_DESCRIPTOR, None),
    _codec(MAX_DESCRIPTOR, None),
    _codec(GENERIC_DESCRIPTOR, _decode_generic),
]


def set_version_and_variant(digest: bytes, version: int) -> bytes:
    """Overwrite the version nibble and RFC variant bits of 16 bytes."""
    data = bytearray(digest[:16])
    data[6] = (data[6] & 0x0F) | (version << 4)
    data[8] = (data[8] & 0x3F) | 0x80
    return bytes(data)


def resolve_namespace(namespace: Union[str, bytes, RawId]) -> bytes:
    """Resolve a namespace name, UUID text, 16 bytes or RawId to 16 bytes.

    Raises:
        StructuralMismatchError: If the namespace cannot be resolved
    """
    if isinstance(namespace, RawId):
        if not namespace.tag.is_uuid:
            raise StructuralMismatchError(f"Namespace must be a UUID, got {namespace.tag}")
        return namespace.data
    if isinstance(namespace, bytes):
        if len(namespace) != 16:
            raise StructuralMismatchError("Namespace must be exactly 16 bytes")
        return namespace
    text = NAMESPACES.get(namespace.strip().lower(), namespace)
    data = parse_uuid_bytes(text)
    if data is None:
        raise StructuralMismatchError(
            f"Invalid namespace: '{namespace}'",
            hint=f"Use a UUID or one of: {', '.join(NAMESPACES)}",
        )
    return data


def uuid_from_name(
    namespace: Union[str, bytes, RawId],
    name: Union[str, bytes],
    version: int = 5,
) -> RawId:
    """Build a name-based UUID (v3 = MD5, v5 = SHA-1).

    Args:
        namespace: Namespace UUID (text, bytes, RawId or a well-known name)
        name: Name to hash (str is UTF-8 encoded)
        version: 3 or 5

    Returns:
        RawId tagged uuidv3 or uuidv5

    Example:
        >>> format_uuid(uuid_from_name("dns", "python.org", 5).data)
        '886313e1-3b8a-5372-9b90-0c9aee199e5d'
    """
    if version not in (3, 5):
        raise ValueError(f"Name-based UUIDs are version 3 or 5, got {version}")
    ns = resolve_namespace(namespace)
    payload = name.encode("utf-8") if isinstance(name, str) else name
    if version == 3:
        digest = hashlib.md5(ns + payload, usedforsecurity=False).digest()
        return RawId(TypeTag.UUID_V3, set_version_and_variant(digest, 3))
    digest = hashlib.sha1(ns + payload, usedforsecurity=False).digest()
    return RawId(TypeTag.UUID_V5, set_version_and_variant(digest, 5))


def build_v7(unix_ms: int, rand_a: int, rand_b: int) -> RawId:
    """Pack a UUIDv7 from its timestamp and random fields."""
    data = pack(
        {"unix_ts_ms": unix_ms, "version": 7, "rand_a": rand_a, "variant": 2, "rand_b": rand_b},
        V7_LAYOUT,
    )
    return RawId(TypeTag.UUID_V7, data)
