"""
ID factory.

Owns one instance of each stateful generator and dispatches
``generate(tag, options)`` to the right one. A module-level default factory
backs ``idforge.generate``; create your own ``IdFactory`` to inject a clock
or random source, or to keep generator state isolated.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Union

from idforge.codecs.nanoid import DEFAULT_LENGTH as NANOID_DEFAULT_LENGTH
from idforge.codecs.nanoid import URL_SAFE_ALPHABET
from idforge.exceptions import GenerationError
from idforge.generators import random as random_ids
from idforge.generators import sortable
from idforge.generators import uuid as uuid_ids
from idforge.generators.clock import SYSTEM_CLOCK, SYSTEM_RANDOM, Clock, RandomSource
from idforge.generators.snowflake import SnowflakeGenerator
from idforge.generators.ulid import MonotonicUlidGenerator
from idforge.models import RawId, TypeTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnowflakeOptions:
    epoch_ms: Union[int, str] = 0
    datacenter_id: int = 0
    worker_id: int = 0


@dataclass(frozen=True)
class NanoIdOptions:
    alphabet: str = URL_SAFE_ALPHABET
    length: int = NANOID_DEFAULT_LENGTH


@dataclass(frozen=True)
class NameBasedOptions:
    """Namespace (UUID text or dns/url/oid/x500) and name for UUID v3/v5."""

    namespace: str
    name: str


@dataclass(frozen=True)
class TypeIdOptions:
    prefix: str = ""


@dataclass(frozen=True)
class Cuid2Options:
    length: int = 24


@dataclass(frozen=True)
class TsidOptions:
    node: Optional[int] = None


GeneratorOptions = Union[
    SnowflakeOptions,
    NanoIdOptions,
    NameBasedOptions,
    TypeIdOptions,
    Cuid2Options,
    TsidOptions,
]

_OPTION_TYPES: dict[TypeTag, type] = {
    TypeTag.SNOWFLAKE: SnowflakeOptions,
    TypeTag.NANOID: NanoIdOptions,
    TypeTag.UUID_V3: NameBasedOptions,
    TypeTag.UUID_V5: NameBasedOptions,
    TypeTag.TYPEID: TypeIdOptions,
    TypeTag.CUID2: Cuid2Options,
    TypeTag.TSID: TsidOptions,
}


class IdFactory:
    """Generates identifiers of every supported type."""

    def __init__(self, clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM):
        """Initialize factory.

        Args:
            clock: Time source shared by all generators
            rng: Random source shared by all generators
        """
        self.clock = clock
        self.rng = rng
        self.time_uuid = uuid_ids.TimeBasedUuidGenerator(clock, rng)
        self.ulid = MonotonicUlidGenerator(clock, rng)
        self.objectid = sortable.objectid_generator(clock, rng)
        self.xid = sortable.xid_generator(clock, rng)
        self.cuid = sortable.CuidGenerator(clock, rng)
        self.cuid2 = random_ids.Cuid2Generator(clock, rng)
        self._snowflakes: dict[tuple[int, int, int], SnowflakeGenerator] = {}
        self._tsids: dict[Optional[int], sortable.TsidGenerator] = {}
        self._lock = threading.Lock()

    def snowflake(self, options: SnowflakeOptions = SnowflakeOptions()) -> SnowflakeGenerator:
        """Generator for one Snowflake configuration, created on first use."""
        probe = SnowflakeGenerator(
            options.epoch_ms, options.datacenter_id, options.worker_id, self.clock
        )
        key = (probe.epoch_ms, options.datacenter_id, options.worker_id)
        with self._lock:
            if key not in self._snowflakes:
                logger.debug(f"Creating Snowflake generator for {key}")
                self._snowflakes[key] = probe
            return self._snowflakes[key]

    def tsid(self, options: TsidOptions = TsidOptions()) -> sortable.TsidGenerator:
        with self._lock:
            if options.node not in self._tsids:
                self._tsids[options.node] = sortable.TsidGenerator(
                    options.node, self.clock, self.rng
                )
            return self._tsids[options.node]

    def generate(self, tag: Union[TypeTag, str], options: Optional[GeneratorOptions] = None) -> RawId:
        """Generate one identifier.

        Args:
            tag: Type to generate (tag or name); 'uuid' yields a UUIDv4
            options: Per-type options record; defaults apply when omitted

        Returns:
            RawId of the generated identifier

        Raises:
            GenerationError: On invalid options, or options of the wrong type
            LayoutError: On out-of-range Snowflake/TSID configuration
            ClockMovedBackwardsError: Snowflake clock regression
            RandomOverflowError: Monotonic ULID exhaustion
        """
        if isinstance(tag, str):
            tag = TypeTag.parse(tag)

        expected = _OPTION_TYPES.get(tag)
        if options is not None and (expected is None or not isinstance(options, expected)):
            raise GenerationError(
                f"Options {type(options).__name__} do not apply to {tag}"
            )
        if options is None and expected is not None:
            if expected is NameBasedOptions:
                raise GenerationError(
                    f"{tag} requires a namespace and a name.\n\n"
                    f"Suggestions:\n"
                    f"1. Pass NameBasedOptions(namespace='dns', name='example.com')\n"
                    f"2. Use a UUID namespace or one of: dns, url, oid, x500"
                )
            options = expected()

        if tag in (TypeTag.UUID, TypeTag.UUID_V4):
            return uuid_ids.uuid_v4(self.rng)
        if tag is TypeTag.UUID_V1:
            return self.time_uuid.v1()
        if tag is TypeTag.UUID_V6:
            return self.time_uuid.v6()
        if tag is TypeTag.UUID_V7:
            return uuid_ids.uuid_v7(self.clock, self.rng)
        if tag is TypeTag.UUID_V3:
            return uuid_ids.uuid_v3(options.namespace, options.name)
        if tag is TypeTag.UUID_V5:
            return uuid_ids.uuid_v5(options.namespace, options.name)
        if tag is TypeTag.UUID_NIL:
            return uuid_ids.uuid_nil()
        if tag is TypeTag.UUID_MAX:
            return uuid_ids.uuid_max()
        if tag is TypeTag.ULID:
            return self.ulid.generate()
        if tag is TypeTag.SNOWFLAKE:
            return self.snowflake(options).generate()
        if tag is TypeTag.NANOID:
            return random_ids.nanoid(options.alphabet, options.length, self.rng)
        if tag is TypeTag.KSUID:
            return sortable.ksuid(self.clock, self.rng)
        if tag is TypeTag.OBJECTID:
            return self.objectid.generate()
        if tag is TypeTag.XID:
            return self.xid.generate()
        if tag is TypeTag.TSID:
            return self.tsid(options).generate()
        if tag is TypeTag.TYPEID:
            return sortable.typeid(options.prefix, self.clock, self.rng)
        if tag is TypeTag.CUID:
            return self.cuid.generate()
        if tag is TypeTag.CUID2:
            return self.cuid2.generate(options.length)
        raise GenerationError(f"No generator for {tag}")

    def generate_batch(
        self,
        tag: Union[TypeTag, str],
        count: int,
        options: Optional[GeneratorOptions] = None,
    ) -> list[RawId]:
        """Generate ``count`` identifiers of one type."""
        return [self.generate(tag, options) for _ in range(count)]


DEFAULT_FACTORY = IdFactory()


def generate(tag: Union[TypeTag, str], options: Optional[GeneratorOptions] = None) -> RawId:
    """Generate one identifier with the default factory."""
    return DEFAULT_FACTORY.generate(tag, options)
