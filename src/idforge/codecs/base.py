"""Codec record and helpers shared by the format codecs."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from idforge.bits import unpack
from idforge.exceptions import FieldAccessError
from idforge.models import DecodedFields, FormatDescriptor, RawId, TypeTag

Parser = Callable[[str], Optional[RawId]]
Renderer = Callable[[RawId], str]
FieldDecoder = Callable[[RawId], DecodedFields]
Guard = Callable[[str], bool]


@dataclass(frozen=True)
class Codec:
    """Parse/render/field-decode function set for one identifier format.

    Attributes:
        descriptor: Static format description
        try_parse: Text to RawId, or None on any structural mismatch
        to_canonical: RawId to canonical text
        decode_fields: RawId to decoded fields, or None when the format
            has nothing to decode (nil/max UUID)
        detect_guard: Extra shape check applied only during auto-detection,
            for formats whose parser is deliberately lenient
        mismatch_hint: Remediation hint used when a hinted parse fails
    """

    descriptor: FormatDescriptor
    try_parse: Parser
    to_canonical: Renderer
    decode_fields: Optional[FieldDecoder] = None
    detect_guard: Optional[Guard] = None
    mismatch_hint: Optional[str] = None

    @property
    def tag(self) -> TypeTag:
        return self.descriptor.tag

    def admits(self, text: str) -> bool:
        """Whether auto-detection should try this codec on ``text``."""
        return self.detect_guard is None or self.detect_guard(text)


def layout_fields(raw: RawId, descriptor: FormatDescriptor) -> dict[str, int]:
    """Unpack every bit field of ``raw`` using the descriptor's layout."""
    if descriptor.layout is None:
        raise FieldAccessError(f"{descriptor.tag} has no bit layout")
    return unpack(raw.data, descriptor.layout)


def field_value(raw: RawId, descriptor: FormatDescriptor, name: str) -> int:
    """Extract one named bit field.

    Raises:
        FieldAccessError: If the format does not define ``name``
    """
    layout = descriptor.layout
    if layout is None or name not in layout:
        raise FieldAccessError(f"{descriptor.tag} has no field '{name}'")
    return (raw.as_int() >> layout.shift(name)) & layout[name].max_value


def clean(text: str) -> str:
    """Normalize raw input before a structural check."""
    return text.strip()
