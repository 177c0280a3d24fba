"""
Core data models for idforge.

Defines the value types shared by the codecs, the detection engine, the
generators and the comparator: the closed set of identifier types, the raw
byte representation, static format descriptors and decoded field maps.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from idforge.bits import Layout, bytes_to_int
from idforge.exceptions import LayoutError, UnknownTypeError


class TypeTag(enum.Enum):
    """Closed set of identifier formats known to the engine."""

    UUID = "uuid"
    UUID_V1 = "uuidv1"
    UUID_V3 = "uuidv3"
    UUID_V4 = "uuidv4"
    UUID_V5 = "uuidv5"
    UUID_V6 = "uuidv6"
    UUID_V7 = "uuidv7"
    UUID_NIL = "uuid-nil"
    UUID_MAX = "uuid-max"
    ULID = "ulid"
    NANOID = "nanoid"
    KSUID = "ksuid"
    SNOWFLAKE = "snowflake"
    OBJECTID = "objectid"
    TYPEID = "typeid"
    XID = "xid"
    CUID = "cuid"
    CUID2 = "cuid2"
    TSID = "tsid"

    def __str__(self) -> str:
        return self.value

    @property
    def byte_length(self) -> int | None:
        """Fixed byte length, or None for variable-length formats."""
        return _BYTE_LENGTHS[self]

    @property
    def is_uuid(self) -> bool:
        """True for the UUID family (generic, versioned, nil, max)."""
        return self in UUID_TAGS

    @classmethod
    def parse(cls, name: str) -> TypeTag:
        """Resolve a type name or alias.

        Raises:
            UnknownTypeError: If the name is not recognized
        """
        key = name.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise UnknownTypeError(name, [t.value for t in cls]) from None


UUID_TAGS = frozenset(
    {
        TypeTag.UUID,
        TypeTag.UUID_V1,
        TypeTag.UUID_V3,
        TypeTag.UUID_V4,
        TypeTag.UUID_V5,
        TypeTag.UUID_V6,
        TypeTag.UUID_V7,
        TypeTag.UUID_NIL,
        TypeTag.UUID_MAX,
    }
)

_BYTE_LENGTHS: dict[TypeTag, Optional[int]] = {
    **{tag: 16 for tag in UUID_TAGS},
    TypeTag.ULID: 16,
    TypeTag.NANOID: None,
    TypeTag.KSUID: 20,
    TypeTag.SNOWFLAKE: 8,
    TypeTag.OBJECTID: 12,
    TypeTag.TYPEID: 16,
    TypeTag.XID: 12,
    TypeTag.CUID: 25,
    TypeTag.CUID2: None,
    TypeTag.TSID: 8,
}

_ALIASES: dict[str, TypeTag] = {
    "uuid-v1": TypeTag.UUID_V1,
    "uuid1": TypeTag.UUID_V1,
    "uuid-v3": TypeTag.UUID_V3,
    "uuid3": TypeTag.UUID_V3,
    "uuid-v4": TypeTag.UUID_V4,
    "uuid4": TypeTag.UUID_V4,
    "uuid-v5": TypeTag.UUID_V5,
    "uuid5": TypeTag.UUID_V5,
    "uuid-v6": TypeTag.UUID_V6,
    "uuid6": TypeTag.UUID_V6,
    "uuid-v7": TypeTag.UUID_V7,
    "uuid7": TypeTag.UUID_V7,
    "uuidnil": TypeTag.UUID_NIL,
    "nil": TypeTag.UUID_NIL,
    "uuidmax": TypeTag.UUID_MAX,
    "max": TypeTag.UUID_MAX,
    "nano": TypeTag.NANOID,
    "snow": TypeTag.SNOWFLAKE,
    "oid": TypeTag.OBJECTID,
    "mongoid": TypeTag.OBJECTID,
}


@dataclass(frozen=True)
class RawId:
    """Immutable byte representation of a parsed or generated identifier.

    ``prefix`` carries the TypeID type prefix, which is not part of the
    128-bit payload. It must be empty for every other format.
    """

    tag: TypeTag
    data: bytes
    prefix: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        expected = self.tag.byte_length
        if expected is None:
            if not self.data:
                raise LayoutError(f"{self.tag} value must not be empty")
        elif len(self.data) != expected:
            raise LayoutError(
                f"{self.tag} requires {expected} bytes, got {len(self.data)}"
            )
        if self.prefix and self.tag is not TypeTag.TYPEID:
            raise LayoutError(f"{self.tag} does not carry a prefix")

    def __len__(self) -> int:
        return len(self.data)

    def as_int(self) -> int:
        """Unsigned big-endian integer value of the bytes."""
        return bytes_to_int(self.data)


@dataclass(frozen=True)
class FormatDescriptor:
    """Static, read-only description of one identifier format."""

    tag: TypeTag
    description: str
    alphabet: str
    canonical_length: Optional[int]
    has_timestamp: bool = False
    sortable: bool = False
    case_insensitive: bool = False
    layout: Optional[Layout] = None

    @property
    def byte_length(self) -> Optional[int]:
        return self.tag.byte_length

    @property
    def bit_length(self) -> Optional[int]:
        length = self.tag.byte_length
        return None if length is None else length * 8


@dataclass(frozen=True)
class Timestamp:
    """A decoded identifier timestamp.

    Attributes:
        unix_ns: Nanoseconds since the Unix epoch (may be negative)
        precision: Native precision of the source field ("s", "ms", "100ns")
    """

    unix_ns: int
    precision: str = "ms"

    @classmethod
    def from_millis(cls, millis: int) -> Timestamp:
        return cls(millis * 1_000_000, "ms")

    @classmethod
    def from_seconds(cls, seconds: int) -> Timestamp:
        return cls(seconds * 1_000_000_000, "s")

    @property
    def millis(self) -> int:
        """Milliseconds since the Unix epoch (floored)."""
        return self.unix_ns // 1_000_000

    def to_datetime(self) -> datetime:
        """Aware UTC datetime (microsecond resolution)."""
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        return epoch + timedelta(microseconds=self.unix_ns // 1000)

    def to_iso8601(self) -> str:
        """ISO-8601 UTC string with millisecond precision."""
        try:
            dt = self.to_datetime()
        except OverflowError:
            return "invalid"
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


@dataclass
class DecodedFields:
    """Decoded identifier fields."""

    tag: TypeTag
    components: dict[str, Any]
    timestamp: Optional[Timestamp] = None
    version: Optional[int] = None
    variant: Optional[str] = None
    random_bits: Optional[int] = None

    def __getitem__(self, key: str) -> Any:
        """Get component by name."""
        return self.components[key]

    def __contains__(self, key: object) -> bool:
        return key in self.components

    def get(self, key: str, default: Any = None) -> Any:
        """Get component with default."""
        return self.components.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view for JSON rendering."""
        result: dict[str, Any] = {"type": self.tag.value}
        if self.timestamp is not None:
            result["timestamp_ms"] = self.timestamp.millis
            result["timestamp_iso"] = self.timestamp.to_iso8601()
        if self.version is not None:
            result["version"] = self.version
        if self.variant is not None:
            result["variant"] = self.variant
        if self.random_bits is not None:
            result["random_bits"] = self.random_bits
        result["components"] = dict(self.components)
        return result


@dataclass(frozen=True)
class EncodingResult:
    """A rendered identifier and the encoding used."""

    text: str
    encoding: str

    def __str__(self) -> str:
        return self.text


class Order(enum.Enum):
    """Three-way comparison outcome."""

    LESS = "less"
    EQUAL = "equal"
    GREATER = "greater"

    @classmethod
    def of(cls, left: Any, right: Any) -> Order:
        if left < right:
            return cls.LESS
        if left > right:
            return cls.GREATER
        return cls.EQUAL

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing two identifiers."""

    binary_order: Order
    lexicographic_order: Order
    chronological_order: Optional[Order] = None
    time_diff: Optional[timedelta] = None
    time_diff_ns: Optional[int] = None
    type_mismatch: bool = False
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "binary_order": self.binary_order.value,
            "lexicographic_order": self.lexicographic_order.value,
        }
        if self.chronological_order is not None:
            result["chronological_order"] = self.chronological_order.value
        if self.time_diff_ns is not None:
            result["time_diff_ms"] = self.time_diff_ns / 1_000_000
        if self.type_mismatch:
            result["warnings"] = list(self.warnings)
        return result


@dataclass
class ValidationResult:
    """Identifier validation result."""

    valid: bool
    tag: Optional[TypeTag] = None
    error: Optional[str] = None
    hint: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "valid": self.valid,
            "id_type": self.tag.value if self.tag else None,
        }
        if self.error:
            result["error"] = self.error
        if self.hint:
            result["hint"] = self.hint
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result
