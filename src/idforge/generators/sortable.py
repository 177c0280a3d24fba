"""Generators for the time-sortable formats: KSUID, ObjectId, XID, TSID,
TypeID and CUID."""

import logging
import os
import socket
import threading
from collections.abc import Callable
from typing import Optional

from idforge.codecs.cuid import BASE36_ALPHABET
from idforge.codecs.ksuid import build_ksuid
from idforge.codecs.objectid import build_objectid
from idforge.codecs.tsid import LAYOUT as TSID_LAYOUT
from idforge.codecs.tsid import build_tsid
from idforge.codecs.typeid import is_valid_prefix
from idforge.codecs.xid import build_xid
from idforge.encoding import int_to_text
from idforge.exceptions import GenerationError, LayoutError
from idforge.generators.clock import SYSTEM_CLOCK, SYSTEM_RANDOM, Clock, RandomSource
from idforge.generators.uuid import uuid_v7
from idforge.models import RawId, TypeTag

logger = logging.getLogger(__name__)

COUNTER_MASK = 0xFFFFFF
MAX_TSID_NODE = TSID_LAYOUT["node"].max_value
MAX_TSID_COUNTER = TSID_LAYOUT["counter"].max_value


def ksuid(clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM) -> RawId:
    """KSUID: seconds since 2014-05-13 followed by 16 random bytes."""
    return build_ksuid(clock.now_s(), rng.token_bytes(16))


class ProcessCounterGenerator:
    """Seconds + machine + pid + counter generator (ObjectId and XID).

    The machine id is drawn once per instance; the counter starts at a
    random value and wraps at 24 bits.
    """

    def __init__(
        self,
        builder: Callable[[int, int, int, int], RawId],
        clock: Clock = SYSTEM_CLOCK,
        rng: RandomSource = SYSTEM_RANDOM,
        pid: Optional[int] = None,
    ):
        self.builder = builder
        self.clock = clock
        self.machine = rng.randbits(24)
        self.pid = (os.getpid() if pid is None else pid) & 0xFFFF
        self.counter = rng.randbits(24)
        self._lock = threading.Lock()

    def generate(self) -> RawId:
        with self._lock:
            self.counter = (self.counter + 1) & COUNTER_MASK
            counter = self.counter
        return self.builder(self.clock.now_s(), self.machine, self.pid, counter)


def objectid_generator(
    clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM
) -> ProcessCounterGenerator:
    return ProcessCounterGenerator(build_objectid, clock, rng)


def xid_generator(
    clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM
) -> ProcessCounterGenerator:
    return ProcessCounterGenerator(build_xid, clock, rng)


class TsidGenerator:
    """TSID generator: Unix ms, 10-bit node, 12-bit counter.

    The counter restarts at a random value each new millisecond and
    increments within one. When it overflows the generator borrows the
    next millisecond, so output stays strictly increasing.
    """

    def __init__(
        self,
        node: Optional[int] = None,
        clock: Clock = SYSTEM_CLOCK,
        rng: RandomSource = SYSTEM_RANDOM,
    ):
        """Initialize generator.

        Args:
            node: Node id (0-1023); random if omitted
            clock: Time source
            rng: Random source

        Raises:
            LayoutError: If ``node`` is out of range
        """
        if node is None:
            node = rng.randbelow(MAX_TSID_NODE + 1)
        if not 0 <= node <= MAX_TSID_NODE:
            raise LayoutError(f"TSID node must be between 0 and {MAX_TSID_NODE}, got {node}")
        self.node = node
        self.clock = clock
        self.rng = rng
        self.last_timestamp_ms = -1
        self.counter = 0
        self._lock = threading.Lock()

    def generate(self) -> RawId:
        with self._lock:
            now = self.clock.now_ms()
            if now > self.last_timestamp_ms:
                self.last_timestamp_ms = now
                self.counter = self.rng.randbelow(MAX_TSID_COUNTER + 1)
            else:
                self.counter += 1
                if self.counter > MAX_TSID_COUNTER:
                    self.last_timestamp_ms += 1
                    self.counter = 0
                    logger.debug(
                        f"TSID counter overflow, borrowing millisecond {self.last_timestamp_ms}"
                    )
            return build_tsid(self.last_timestamp_ms, self.node, self.counter)


def typeid(
    prefix: str = "",
    clock: Clock = SYSTEM_CLOCK,
    rng: RandomSource = SYSTEM_RANDOM,
) -> RawId:
    """TypeID: ``prefix`` plus a fresh UUIDv7 payload.

    Raises:
        GenerationError: If the prefix is not a valid TypeID prefix
    """
    if not is_valid_prefix(prefix):
        raise GenerationError(
            f"Invalid TypeID prefix '{prefix}'. Use 1-63 lowercase letters or "
            f"underscores, starting and ending with a letter."
        )
    return RawId(TypeTag.TYPEID, uuid_v7(clock, rng).data, prefix=prefix)


def _base36(value: int, width: int) -> str:
    return int_to_text(value % 36**width, BASE36_ALPHABET, width)


def host_fingerprint(pid: Optional[int] = None, hostname: Optional[str] = None) -> str:
    """Four base36 characters derived from the process id and host name."""
    pid = os.getpid() if pid is None else pid
    hostname = socket.gethostname() if hostname is None else hostname
    host_id = sum(ord(ch) for ch in hostname) + len(hostname) + 36
    return _base36(pid, 2) + _base36(host_id, 2)


class CuidGenerator:
    """CUID (v1) generator: ``c`` + time + counter + fingerprint + random."""

    BLOCK = 36**4

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        rng: RandomSource = SYSTEM_RANDOM,
        fingerprint: Optional[str] = None,
    ):
        fingerprint = fingerprint or host_fingerprint()
        if len(fingerprint) != 4 or not set(fingerprint) <= set(BASE36_ALPHABET):
            raise GenerationError(
                f"CUID fingerprint must be 4 lowercase base36 characters, got '{fingerprint}'"
            )
        self.clock = clock
        self.rng = rng
        self.fingerprint = fingerprint
        self.counter = 0
        self._lock = threading.Lock()

    def generate(self) -> RawId:
        with self._lock:
            counter = self.counter
            self.counter = (self.counter + 1) % self.BLOCK
        text = (
            "c"
            + _base36(self.clock.now_ms(), 8)
            + _base36(counter, 4)
            + self.fingerprint
            + _base36(self.rng.randbelow(self.BLOCK), 4)
            + _base36(self.rng.randbelow(self.BLOCK), 4)
        )
        return RawId(TypeTag.CUID, text.encode("ascii"))
