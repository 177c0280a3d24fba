"""Identifier generators with injectable clock and randomness."""

from idforge.generators.clock import Clock, RandomSource, SystemClock, SystemRandom
from idforge.generators.factory import (
    DEFAULT_FACTORY,
    Cuid2Options,
    IdFactory,
    NameBasedOptions,
    NanoIdOptions,
    SnowflakeOptions,
    TsidOptions,
    TypeIdOptions,
    generate,
)
from idforge.generators.snowflake import SnowflakeGenerator
from idforge.generators.ulid import MonotonicUlidGenerator

__all__ = [
    "Clock",
    "RandomSource",
    "SystemClock",
    "SystemRandom",
    "IdFactory",
    "DEFAULT_FACTORY",
    "generate",
    "SnowflakeOptions",
    "NanoIdOptions",
    "NameBasedOptions",
    "TypeIdOptions",
    "Cuid2Options",
    "TsidOptions",
    "SnowflakeGenerator",
    "MonotonicUlidGenerator",
]
