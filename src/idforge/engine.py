"""
Engine façade.

The typed entry points used by the CLI and by library callers: detect,
parse, render, re-encode, decode fields, generate, compare, validate and
inspect identifiers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from idforge.codecs.registry import REGISTRY
from idforge.codecs.snowflake import decode_with_epoch, resolve_epoch
from idforge.codecs.uuid import classify_uuid
from idforge.comparator import compare as _compare
from idforge.detection import Detection, TypeHint, resolve_hint
from idforge.detection import detect as _detect
from idforge.detection import validate as _validate
from idforge.encoding import Case, EncodingFormat, apply_case, decode_text, encode_bytes
from idforge.exceptions import EncodeError, LayoutError, StructuralMismatchError
from idforge.generators.factory import DEFAULT_FACTORY, GeneratorOptions
from idforge.models import (
    ComparisonResult,
    DecodedFields,
    EncodingResult,
    RawId,
    TypeTag,
    ValidationResult,
)

logger = logging.getLogger(__name__)

CANONICAL = "canonical"

EncodingName = Union[EncodingFormat, str]
CaseName = Union[Case, str, None]

INSPECT_ENCODINGS = (
    EncodingFormat.HEX,
    EncodingFormat.BASE32,
    EncodingFormat.BASE58,
    EncodingFormat.BASE64,
    EncodingFormat.INT,
)


def _resolve_case(case: CaseName) -> Optional[Case]:
    if case is None or isinstance(case, Case):
        return case
    try:
        return Case(case.strip().lower())
    except ValueError:
        raise EncodeError(f"Unknown case '{case}'. Use 'upper' or 'lower'.") from None


def _is_canonical(encoding: EncodingName) -> bool:
    return isinstance(encoding, str) and encoding.strip().lower() == CANONICAL


def detect(text: str, hint: TypeHint = None, strict: bool = False) -> Detection:
    """Detect the type of ``text``; see :func:`idforge.detection.detect`."""
    return _detect(text, hint=hint, strict=strict)


def parse(text: str, hint: TypeHint = None, strict: bool = False) -> RawId:
    """Detect ``text`` and return only its raw bytes."""
    return _detect(text, hint=hint, strict=strict).raw


def canonical(raw: RawId) -> str:
    """Render ``raw`` in its format's canonical text form."""
    return REGISTRY.get(raw.tag).to_canonical(raw)


def encode(raw: RawId, encoding: EncodingName, case: CaseName = None) -> str:
    """Encode an identifier.

    Args:
        raw: Identifier to encode
        encoding: An EncodingFormat, its name, or 'canonical'
        case: Optional 'upper' / 'lower' post-processing

    Returns:
        Encoded text

    Raises:
        EncodeError: Unknown encoding, or a case change the alphabet
            does not allow

    Example:
        >>> encode(parse("550e8400-e29b-41d4-a716-446655440000"), "int")
        '113059749145936325402354257176981405696'
    """
    case = _resolve_case(case)
    if _is_canonical(encoding):
        descriptor = REGISTRY.get(raw.tag).descriptor
        return apply_case(
            canonical(raw), case, not descriptor.case_insensitive, str(raw.tag)
        )
    fmt = encoding if isinstance(encoding, EncodingFormat) else EncodingFormat.parse(encoding)
    return encode_bytes(raw.data, fmt, case)


def encode_all(
    raw: RawId,
    encodings: tuple[EncodingName, ...] = INSPECT_ENCODINGS,
    case: CaseName = None,
) -> list[EncodingResult]:
    """Encode ``raw`` in several encodings."""
    return [EncodingResult(encode(raw, e, case), str(e)) for e in encodings]


def _checked(raw: RawId) -> RawId:
    codec = REGISTRY.get(raw.tag)
    try:
        text = codec.to_canonical(raw)
    except (UnicodeDecodeError, LayoutError):
        text = None
    if text is None or codec.try_parse(text) is None:
        raise StructuralMismatchError(f"Decoded bytes are not a valid {raw.tag}.")
    return raw


def decode(
    text: str,
    encoding: EncodingName,
    tag: Union[TypeTag, str],
    prefix: str = "",
) -> RawId:
    """Decode ``text`` in ``encoding`` back into an identifier of type ``tag``.

    Args:
        text: Encoded text
        encoding: An EncodingFormat, its name, or 'canonical'
        tag: Identifier type the bytes belong to ('uuid' picks the
            matching UUID version)
        prefix: TypeID prefix to attach (TypeID only)

    Returns:
        RawId

    Raises:
        DecodeError: Text is not valid in the encoding or has the wrong length
        StructuralMismatchError: Bytes do not form a valid identifier
    """
    tag = resolve_hint(tag)
    if _is_canonical(encoding):
        return _detect(text, hint=tag).raw

    fmt = encoding if isinstance(encoding, EncodingFormat) else EncodingFormat.parse(encoding)
    data = decode_text(text, fmt, tag.byte_length)

    if tag.is_uuid:
        actual = classify_uuid(data)
        if tag is not TypeTag.UUID and actual is not tag:
            raise StructuralMismatchError(
                f"Decoded bytes are a {actual}, not a {tag}.",
                f"Use type '{actual}' or 'uuid'.",
            )
        return RawId(actual, data)

    return _checked(RawId(tag, data, prefix=prefix))


def decode_fields(raw: RawId, epoch: Union[int, str, None] = None) -> Optional[DecodedFields]:
    """Decode the fields of ``raw``, or None if the format has none.

    Args:
        raw: Identifier
        epoch: Snowflake epoch (milliseconds or a name); ignored otherwise
    """
    if raw.tag is TypeTag.SNOWFLAKE and epoch is not None:
        return decode_with_epoch(raw, resolve_epoch(epoch))
    decoder = REGISTRY.get(raw.tag).decode_fields
    return None if decoder is None else decoder(raw)


def generate(tag: Union[TypeTag, str], options: Optional[GeneratorOptions] = None) -> RawId:
    """Generate an identifier with the default factory."""
    return DEFAULT_FACTORY.generate(tag, options)


def compare(a: RawId, b: RawId) -> ComparisonResult:
    """Compare two identifiers; see :func:`idforge.comparator.compare`."""
    return _compare(a, b)


def validate(text: str, hint: TypeHint = None, strict: bool = False) -> ValidationResult:
    """Validate ``text`` without raising; see :func:`idforge.detection.validate`."""
    return _validate(text, hint=hint, strict=strict)


@dataclass
class Inspection:
    """Everything known about one identifier."""

    tag: TypeTag
    canonical: str
    description: str
    fields: Optional[DecodedFields] = None
    encodings: list[EncodingResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id_type": self.tag.value,
            "canonical": self.canonical,
            "description": self.description,
        }
        if self.fields is not None:
            decoded = self.fields.to_dict()
            decoded.pop("type")
            result.update(decoded)
        result["encodings"] = {e.encoding: e.text for e in self.encodings}
        return result


def inspect(
    text: str,
    hint: TypeHint = None,
    strict: bool = False,
    epoch: Union[int, str, None] = None,
) -> Inspection:
    """Detect ``text`` and gather its canonical form, fields and encodings."""
    tag, raw = _detect(text, hint=hint, strict=strict)
    codec = REGISTRY.get(tag)
    logger.debug(f"Inspecting {tag} '{text.strip()}'")
    return Inspection(
        tag=tag,
        canonical=codec.to_canonical(raw),
        description=codec.descriptor.description,
        fields=decode_fields(raw, epoch),
        encodings=encode_all(raw),
    )
