"""
idforge - Identifier Toolkit

Parses, detects, generates, re-encodes and compares unique identifiers:
UUID (v1/v3/v4/v5/v6/v7/nil/max), ULID, NanoID, Snowflake, KSUID, ObjectId,
TypeID, XID, CUID, CUID2 and TSID.
"""

from idforge.codecs.uuid import uuid_from_name
from idforge.detection import Detection
from idforge.encoding import Case, EncodingFormat
from idforge.engine import (
    Inspection,
    canonical,
    compare,
    decode,
    decode_fields,
    detect,
    encode,
    generate,
    inspect,
    parse,
    validate,
)
from idforge.exceptions import (
    AmbiguousMatchError,
    ClockMovedBackwardsError,
    DecodeError,
    EncodeError,
    FieldAccessError,
    GenerationError,
    IdForgeError,
    LayoutError,
    NoRecognizedFormatError,
    RandomOverflowError,
    StructuralMismatchError,
    UnknownTypeError,
)
from idforge.generators.factory import (
    Cuid2Options,
    IdFactory,
    NameBasedOptions,
    NanoIdOptions,
    SnowflakeOptions,
    TsidOptions,
    TypeIdOptions,
)
from idforge.models import (
    ComparisonResult,
    DecodedFields,
    Order,
    RawId,
    Timestamp,
    TypeTag,
    ValidationResult,
)

__version__ = "0.1.0"

__all__ = [
    "detect",
    "parse",
    "canonical",
    "encode",
    "decode",
    "decode_fields",
    "generate",
    "compare",
    "validate",
    "inspect",
    "uuid_from_name",
    "Detection",
    "Inspection",
    "TypeTag",
    "RawId",
    "DecodedFields",
    "Timestamp",
    "ComparisonResult",
    "Order",
    "ValidationResult",
    "EncodingFormat",
    "Case",
    "IdFactory",
    "SnowflakeOptions",
    "NanoIdOptions",
    "NameBasedOptions",
    "TypeIdOptions",
    "Cuid2Options",
    "TsidOptions",
    "IdForgeError",
    "UnknownTypeError",
    "StructuralMismatchError",
    "NoRecognizedFormatError",
    "AmbiguousMatchError",
    "EncodeError",
    "DecodeError",
    "LayoutError",
    "FieldAccessError",
    "GenerationError",
    "ClockMovedBackwardsError",
    "RandomOverflowError",
]
