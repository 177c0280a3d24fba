"""Snowflake generator.

Thread-safe, one state block per instance. Within one millisecond the
12-bit sequence increments; when it is exhausted the generator yields to
the clock until the next millisecond. A clock that moved backwards is an
error rather than a silent duplicate.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Union

from idforge.codecs.snowflake import LAYOUT, build_snowflake, resolve_epoch
from idforge.exceptions import ClockMovedBackwardsError, LayoutError
from idforge.generators.clock import SYSTEM_CLOCK, Clock
from idforge.models import RawId

logger = logging.getLogger(__name__)

MAX_DATACENTER_ID = LAYOUT["datacenter"].max_value
MAX_WORKER_ID = LAYOUT["worker"].max_value
MAX_SEQUENCE = LAYOUT["sequence"].max_value
MAX_TIMESTAMP = LAYOUT["timestamp"].max_value


@dataclass
class SnowflakeState:
    """Configuration and mutable state of one Snowflake generator."""

    epoch_ms: int
    datacenter_id: int
    worker_id: int
    last_timestamp_ms: int = -1
    sequence: int = 0


class SnowflakeGenerator:
    """Snowflake generator bound to an epoch, datacenter and worker."""

    def __init__(
        self,
        epoch: Union[int, str, None] = 0,
        datacenter_id: int = 0,
        worker_id: int = 0,
        clock: Clock = SYSTEM_CLOCK,
    ):
        """Initialize generator.

        Args:
            epoch: Epoch in Unix milliseconds or a name ('twitter', 'discord')
            datacenter_id: Datacenter id (0-31)
            worker_id: Worker id (0-31)
            clock: Time source

        Raises:
            LayoutError: If an id is out of range or the epoch is invalid
        """
        if not 0 <= datacenter_id <= MAX_DATACENTER_ID:
            raise LayoutError(
                f"Datacenter ID must be between 0 and {MAX_DATACENTER_ID}, got {datacenter_id}"
            )
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise LayoutError(
                f"Worker ID must be between 0 and {MAX_WORKER_ID}, got {worker_id}"
            )
        self.state = SnowflakeState(resolve_epoch(epoch), datacenter_id, worker_id)
        self.clock = clock
        self._lock = threading.Lock()

    @property
    def epoch_ms(self) -> int:
        return self.state.epoch_ms

    def _wait_next_ms(self, last_ms: int) -> int:
        now = self.clock.now_ms()
        while now <= last_ms:
            self.clock.pause()
            now = self.clock.now_ms()
        return now

    def generate(self) -> RawId:
        """Generate the next Snowflake.

        Raises:
            ClockMovedBackwardsError: If the clock reads earlier than the
                last generated timestamp
            LayoutError: If the time is before the epoch or past 41 bits
        """
        with self._lock:
            state = self.state
            now = self.clock.now_ms()

            if now < state.last_timestamp_ms:
                logger.warning(
                    f"Clock moved backwards: last={state.last_timestamp_ms}, now={now}"
                )
                raise ClockMovedBackwardsError(state.last_timestamp_ms, now)

            if now == state.last_timestamp_ms:
                state.sequence = (state.sequence + 1) & MAX_SEQUENCE
                if state.sequence == 0:
                    logger.debug(f"Sequence exhausted at {now}, waiting for next millisecond")
                    now = self._wait_next_ms(state.last_timestamp_ms)
            else:
                state.sequence = 0

            state.last_timestamp_ms = now

            relative = now - state.epoch_ms
            if not 0 <= relative <= MAX_TIMESTAMP:
                raise LayoutError(
                    f"Timestamp {now} is outside the 41-bit range of epoch {state.epoch_ms}"
                )
            return build_snowflake(
                relative, state.datacenter_id, state.worker_id, state.sequence
            )

    def generate_batch(self, count: int) -> list[RawId]:
        """Generate ``count`` Snowflakes in increasing order."""
        return [self.generate() for _ in range(count)]
