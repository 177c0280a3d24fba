"""UUID generators: v1, v3, v4, v5, v6, v7, nil and max."""

import logging
import threading
from typing import Optional, Union

from idforge.bits import pack
from idforge.codecs.uuid import (
    GREGORIAN_OFFSET,
    MAX_BYTES,
    NIL_BYTES,
    V1_LAYOUT,
    V6_LAYOUT,
    build_v7,
    set_version_and_variant,
    uuid_from_name,
)
from idforge.exceptions import LayoutError
from idforge.generators.clock import SYSTEM_CLOCK, SYSTEM_RANDOM, Clock, RandomSource
from idforge.models import RawId, TypeTag

logger = logging.getLogger(__name__)

MULTICAST_BIT = 1 << 40
CLOCK_SEQ_MASK = 0x3FFF


class TimeBasedUuidGenerator:
    """Generator for Gregorian-time UUIDs (v1 and v6).

    Holds the node identifier and the clock sequence. A reading equal to
    (or below the last emitted value but not behind the previous reading)
    is bumped by one tick; a reading behind the previous one increments the
    clock sequence instead.
    """

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        rng: RandomSource = SYSTEM_RANDOM,
        node: Optional[int] = None,
        clock_seq: Optional[int] = None,
    ):
        """Initialize generator.

        Args:
            clock: Time source
            rng: Random source
            node: 48-bit node id; random with the multicast bit set if omitted
            clock_seq: Initial 14-bit clock sequence; random if omitted

        Raises:
            LayoutError: If ``node`` or ``clock_seq`` is out of range
        """
        if node is None:
            node = rng.randbits(48) | MULTICAST_BIT
        if not 0 <= node < 1 << 48:
            raise LayoutError(f"UUID node must fit in 48 bits, got {node}")
        if clock_seq is None:
            clock_seq = rng.randbits(14)
        if not 0 <= clock_seq <= CLOCK_SEQ_MASK:
            raise LayoutError(f"UUID clock sequence must fit in 14 bits, got {clock_seq}")

        self.clock = clock
        self.node = node
        self.clock_seq = clock_seq
        self._last_reading: Optional[int] = None
        self._last_ticks = -1
        self._lock = threading.Lock()

    def _next(self) -> tuple[int, int]:
        with self._lock:
            reading = self.clock.now_ns() // 100 + GREGORIAN_OFFSET
            if self._last_reading is not None and reading < self._last_reading:
                self.clock_seq = (self.clock_seq + 1) & CLOCK_SEQ_MASK
                logger.debug(
                    f"Clock regression of {self._last_reading - reading} ticks, "
                    f"clock_seq bumped to {self.clock_seq}"
                )
                ticks = reading
            else:
                ticks = max(reading, self._last_ticks + 1)
            self._last_reading = reading
            self._last_ticks = ticks
            return ticks, self.clock_seq

    def v1(self) -> RawId:
        ticks, clock_seq = self._next()
        data = pack(
            {
                "time_low": ticks & 0xFFFFFFFF,
                "time_mid": (ticks >> 32) & 0xFFFF,
                "version": 1,
                "time_high": (ticks >> 48) & 0xFFF,
                "variant": 2,
                "clock_seq": clock_seq,
                "node": self.node,
            },
            V1_LAYOUT,
        )
        return RawId(TypeTag.UUID_V1, data)

    def v6(self) -> RawId:
        ticks, clock_seq = self._next()
        data = pack(
            {
                "time_high": (ticks >> 28) & 0xFFFFFFFF,
                "time_mid": (ticks >> 12) & 0xFFFF,
                "version": 6,
                "time_low": ticks & 0xFFF,
                "variant": 2,
                "clock_seq": clock_seq,
                "node": self.node,
            },
            V6_LAYOUT,
        )
        return RawId(TypeTag.UUID_V6, data)


def uuid_v4(rng: RandomSource = SYSTEM_RANDOM) -> RawId:
    """Random UUID: 122 random bits with version 4 and RFC variant."""
    return RawId(TypeTag.UUID_V4, set_version_and_variant(rng.token_bytes(16), 4))


def uuid_v7(clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM) -> RawId:
    """Unix-millisecond timestamp followed by 74 random bits."""
    return build_v7(clock.now_ms(), rng.randbits(12), rng.randbits(62))


def uuid_v3(namespace: Union[str, bytes, RawId], name: Union[str, bytes]) -> RawId:
    return uuid_from_name(namespace, name, 3)


def uuid_v5(namespace: Union[str, bytes, RawId], name: Union[str, bytes]) -> RawId:
    return uuid_from_name(namespace, name, 5)


def uuid_nil() -> RawId:
    return RawId(TypeTag.UUID_NIL, NIL_BYTES)


def uuid_max() -> RawId:
    return RawId(TypeTag.UUID_MAX, MAX_BYTES)
