"""Format codecs: one parse/render/decode record per identifier format."""

from idforge.codecs.base import Codec
from idforge.codecs.registry import REGISTRY, CodecRegistry, get_codec
from idforge.codecs.uuid import NAMESPACES, uuid_from_name

__all__ = [
    "Codec",
    "CodecRegistry",
    "REGISTRY",
    "get_codec",
    "NAMESPACES",
    "uuid_from_name",
]
