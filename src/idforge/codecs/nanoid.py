"""NanoID codec.

NanoIDs have no binary structure: the raw bytes are the ASCII text. Custom
alphabets exist, so any non-empty printable ASCII string without whitespace
parses; auto-detection only considers the default 21-character URL-safe
shape.
"""

from typing import Optional

from idforge.codecs.base import Codec, clean
from idforge.models import DecodedFields, FormatDescriptor, RawId, TypeTag

URL_SAFE_ALPHABET = "_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
DEFAULT_LENGTH = 21

_CHARS = frozenset(URL_SAFE_ALPHABET)

DESCRIPTOR = FormatDescriptor(
    tag=TypeTag.NANOID,
    description="NanoID (URL-friendly random string)",
    alphabet=URL_SAFE_ALPHABET,
    canonical_length=DEFAULT_LENGTH,
)


def is_default_format(text: str) -> bool:
    """Check for the default 21-character URL-safe shape."""
    return len(text) == DEFAULT_LENGTH and set(text) <= _CHARS


def try_parse(text: str) -> Optional[RawId]:
    text = clean(text)
    if not text or not (text.isascii() and text.isprintable()) or " " in text:
        return None
    return RawId(TypeTag.NANOID, text.encode("ascii"))


def to_canonical(raw: RawId) -> str:
    return raw.data.decode("ascii")


def detect_guard(text: str) -> bool:
    return is_default_format(clean(text))


def decode_fields(raw: RawId) -> DecodedFields:
    # 6 bits per character for the default 64-symbol alphabet
    return DecodedFields(
        tag=TypeTag.NANOID,
        components={"length": len(raw.data)},
        random_bits=len(raw.data) * 6,
    )


CODEC = Codec(
    descriptor=DESCRIPTOR,
    try_parse=try_parse,
    to_canonical=to_canonical,
    decode_fields=decode_fields,
    detect_guard=detect_guard,
    mismatch_hint="NanoIDs are printable ASCII without whitespace.",
)
