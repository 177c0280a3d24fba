"""Codec registry: the TypeTag -> Codec table and detection priority."""

from collections.abc import Iterable, Iterator

from idforge.codecs import (
    cuid,
    ksuid,
    nanoid,
    objectid,
    snowflake,
    tsid,
    typeid,
    ulid,
    uuid,
    xid,
)
from idforge.codecs.base import Codec
from idforge.exceptions import UnknownTypeError
from idforge.models import TypeTag

BUILTIN_CODECS: list[Codec] = [
    *uuid.CODECS,
    ulid.CODEC,
    typeid.CODEC,
    ksuid.CODEC,
    xid.CODEC,
    objectid.CODEC,
    tsid.CODEC,
    snowflake.CODEC,
    cuid.CUID_CODEC,
    cuid.CUID2_CODEC,
    nanoid.CODEC,
]


class CodecRegistry:
    """Table of codecs keyed by TypeTag.

    Iteration follows the detection priority order: more structurally
    specific formats first, looser catch-alls last.
    """

    def __init__(self, codecs: Iterable[Codec] = BUILTIN_CODECS) -> None:
        self._codecs: dict[TypeTag, Codec] = {}
        for codec in codecs:
            self.register(codec)

    def register(self, codec: Codec) -> None:
        """Register a codec, replacing any codec for the same tag.

        A replacement keeps its predecessor's priority; a new tag is
        appended at the lowest priority.
        """
        self._codecs[codec.tag] = codec

    def get(self, tag: TypeTag) -> Codec:
        """Look up the codec for ``tag``.

        Raises:
            UnknownTypeError: If no codec is registered for ``tag``
        """
        try:
            return self._codecs[tag]
        except KeyError:
            raise UnknownTypeError(str(tag), [str(t) for t in self._codecs]) from None

    def family(self, tag: TypeTag) -> list[Codec]:
        """Codecs a hint names: the whole UUID family for ``uuid``."""
        if tag is TypeTag.UUID:
            return [c for c in self if c.tag.is_uuid]
        return [self.get(tag)]

    def __iter__(self) -> Iterator[Codec]:
        return iter(self._codecs.values())

    def __contains__(self, tag: object) -> bool:
        return tag in self._codecs

    def __len__(self) -> int:
        return len(self._codecs)

    @property
    def tags(self) -> list[TypeTag]:
        return list(self._codecs)


REGISTRY = CodecRegistry()


def get_codec(tag: TypeTag) -> Codec:
    """Codec for ``tag`` from the default registry."""
    return REGISTRY.get(tag)
