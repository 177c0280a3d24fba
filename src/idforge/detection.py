"""
Detection engine.

Recovers the format of arbitrary identifier text by trial-parsing it through
the codec registry. Ambiguity is reported, never resolved by guessing: when
several formats accept the same text the caller must pass a type hint.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from idforge.codecs.base import Codec
from idforge.codecs.registry import REGISTRY, CodecRegistry
from idforge.codecs.uuid import classify_uuid, parse_uuid_bytes
from idforge.exceptions import (
    AmbiguousMatchError,
    NoRecognizedFormatError,
    StructuralMismatchError,
    UnknownTypeError,
)
from idforge.models import RawId, TypeTag, ValidationResult

logger = logging.getLogger(__name__)

_HEX = frozenset("0123456789abcdefABCDEF")
_CROCKFORD = frozenset("0123456789ABCDEFGHJKMNPQRSTVWXYZabcdefghjkmnpqrstvwxyz")

TypeHint = Union[TypeTag, str, None]


@dataclass(frozen=True)
class Detection:
    """A detected identifier: its type and raw bytes.

    Unpacks like a pair: ``tag, raw = detect(text)``.
    """

    tag: TypeTag
    raw: RawId

    def __iter__(self):
        return iter((self.tag, self.raw))


def resolve_hint(hint: TypeHint) -> Optional[TypeTag]:
    """Turn a hint given as a tag or name into a TypeTag (None passes through)."""
    if hint is None or isinstance(hint, TypeTag):
        return hint
    return TypeTag.parse(hint)


def heuristic_hint(text: str) -> Optional[str]:
    """Best-effort remediation hint for text no codec accepted."""
    length = len(text)
    chars = set(text)
    if length == 32 and chars <= _HEX:
        return "Looks like UUID without dashes. Try adding dashes (8-4-4-4-12)."
    if length == 36 and text.count("-") == 4:
        return "Check for invalid characters in UUID."
    if length in (25, 27) and chars <= _CROCKFORD:
        return f"ULIDs are exactly 26 characters, got {length}."
    if text.isascii() and text.isdigit() and length > 19:
        return "Too many digits for a 64-bit Snowflake ID (maximum 19)."
    if not text:
        return "Input is empty."
    return None


def _hinted_mismatch(text: str, tag: TypeTag, codecs: list[Codec]) -> StructuralMismatchError:
    hint = codecs[0].mismatch_hint
    if tag.is_uuid:
        data = parse_uuid_bytes(text)
        if data is not None:
            actual = classify_uuid(data)
            hint = f"Input is a valid {actual}. Use type '{actual}' or 'uuid'."
        else:
            hint = heuristic_hint(text) or "UUIDs are 32 hex digits, usually 8-4-4-4-12."
    return StructuralMismatchError(f"'{text}' is not a valid {tag}.", hint)


def _strict_mismatch(text: str, tag: TypeTag, canonical: str) -> StructuralMismatchError:
    return StructuralMismatchError(
        f"'{text}' is a {tag} but not in canonical form.",
        f"Canonical form: {canonical}",
    )


def detect(
    text: str,
    hint: TypeHint = None,
    strict: bool = False,
    registry: CodecRegistry = REGISTRY,
) -> Detection:
    """Detect the format of ``text`` and parse it.

    Args:
        text: Identifier text (surrounding whitespace is ignored)
        hint: Optional type tag or name; only that codec is tried
            ('uuid' covers the whole UUID family)
        strict: Require the input to equal its canonical rendering
        registry: Codec registry to use

    Returns:
        Detection with the matched tag and raw bytes

    Raises:
        StructuralMismatchError: Hinted parse failed, or strict check failed
        NoRecognizedFormatError: No format matches
        AmbiguousMatchError: Several formats match
        UnknownTypeError: The hint names no known type

    Example:
        >>> detect("550e8400-e29b-41d4-a716-446655440000").tag
        <TypeTag.UUID_V4: 'uuidv4'>
    """
    stripped = text.strip()
    tag = resolve_hint(hint)

    if tag is not None:
        codecs = registry.family(tag)
        for codec in codecs:
            raw = codec.try_parse(stripped)
            if raw is not None:
                logger.debug(f"Hinted parse of '{stripped}' as {codec.tag} succeeded")
                if strict:
                    canonical = codec.to_canonical(raw)
                    if stripped != canonical:
                        raise _strict_mismatch(stripped, codec.tag, canonical)
                return Detection(codec.tag, raw)
        raise _hinted_mismatch(stripped, tag, codecs)

    matches: list[tuple[Codec, RawId]] = []
    for codec in registry:
        if not codec.admits(stripped):
            continue
        raw = codec.try_parse(stripped)
        if raw is not None:
            matches.append((codec, raw))

    logger.debug(
        f"Detection candidates for '{stripped}': "
        f"{[str(codec.tag) for codec, _ in matches] or 'none'}"
    )

    if not matches:
        raise NoRecognizedFormatError(stripped, heuristic_hint(stripped))

    if strict:
        canonical_matches = [
            (codec, raw) for codec, raw in matches if codec.to_canonical(raw) == stripped
        ]
        if not canonical_matches:
            codec, raw = matches[0]
            raise _strict_mismatch(stripped, codec.tag, codec.to_canonical(raw))
        matches = canonical_matches

    if len(matches) > 1:
        raise AmbiguousMatchError(stripped, [codec.tag for codec, _ in matches])

    codec, raw = matches[0]
    return Detection(codec.tag, raw)


def _warnings_for(tag: TypeTag, raw: RawId) -> list[str]:
    warnings = []
    if tag is TypeTag.CUID:
        warnings.append("CUID v1 is deprecated. Consider CUID2 for new identifiers.")
    elif tag is TypeTag.CUID2 and len(raw.data) != 24:
        warnings.append(f"Non-standard CUID2 length {len(raw.data)} (default is 24).")
    elif tag is TypeTag.NANOID and len(raw.data) != 21:
        warnings.append(f"Non-standard NanoID length {len(raw.data)} (default is 21).")
    return warnings


def validate(
    text: str,
    hint: TypeHint = None,
    strict: bool = False,
    registry: CodecRegistry = REGISTRY,
) -> ValidationResult:
    """Validate ``text`` without raising for bad input.

    Args:
        text: Identifier text
        hint: Optional type tag or name
        strict: Require canonical form
        registry: Codec registry to use

    Returns:
        ValidationResult describing the outcome
    """
    try:
        tag, raw = detect(text, hint=hint, strict=strict, registry=registry)
    except AmbiguousMatchError as e:
        names = ", ".join(str(c) for c in e.candidates)
        return ValidationResult(
            valid=True,
            hint=f"Matches several types ({names}). Pass a type hint to pick one.",
        )
    except StructuralMismatchError as e:
        return ValidationResult(valid=False, error=e.reason, hint=e.hint)
    except UnknownTypeError as e:
        return ValidationResult(valid=False, error=str(e))

    return ValidationResult(valid=True, tag=tag, warnings=_warnings_for(tag, raw))
