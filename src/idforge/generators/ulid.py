"""Monotonic ULID generator."""

import logging
import threading
from dataclasses import dataclass

from idforge.codecs.ulid import build_ulid
from idforge.exceptions import RandomOverflowError
from idforge.generators.clock import SYSTEM_CLOCK, SYSTEM_RANDOM, Clock, RandomSource
from idforge.models import RawId

logger = logging.getLogger(__name__)

MAX_RANDOM = (1 << 80) - 1


@dataclass
class MonotonicUlidState:
    """Mutable state of one monotonic ULID generator."""

    last_timestamp_ms: int = -1
    last_random: int = 0


class MonotonicUlidGenerator:
    """ULID generator whose output strictly increases within a process.

    Within one millisecond the 80-bit random part is incremented instead of
    redrawn. A clock that reads earlier than the last timestamp is treated
    like the same millisecond, so output never goes backwards.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM):
        self.clock = clock
        self.rng = rng
        self.state = MonotonicUlidState()
        self._lock = threading.Lock()

    def generate(self) -> RawId:
        """Generate the next ULID.

        Raises:
            RandomOverflowError: If the random part is exhausted within
                one millisecond
        """
        with self._lock:
            now = self.clock.now_ms()
            state = self.state
            if now <= state.last_timestamp_ms:
                if now < state.last_timestamp_ms:
                    logger.debug(
                        f"Clock behind last ULID timestamp by "
                        f"{state.last_timestamp_ms - now} ms, reusing {state.last_timestamp_ms}"
                    )
                if state.last_random == MAX_RANDOM:
                    raise RandomOverflowError(state.last_timestamp_ms)
                state.last_random += 1
            else:
                state.last_timestamp_ms = now
                state.last_random = self.rng.randbits(80)
            return build_ulid(state.last_timestamp_ms, state.last_random)

    def generate_batch(self, count: int) -> list[RawId]:
        """Generate ``count`` ULIDs in strictly increasing order."""
        return [self.generate() for _ in range(count)]
