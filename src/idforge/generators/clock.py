"""Injected time and randomness capabilities."""

import secrets
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Wall-clock source for time-based generators."""

    @abstractmethod
    def now_ns(self) -> int:
        """Current time in nanoseconds since the Unix epoch."""
        pass

    @abstractmethod
    def pause(self) -> None:
        """Yield briefly while waiting for the clock to advance."""
        pass

    def now_ms(self) -> int:
        return self.now_ns() // 1_000_000

    def now_s(self) -> int:
        return self.now_ns() // 1_000_000_000


class SystemClock(Clock):
    """Clock backed by ``time.time_ns``."""

    def now_ns(self) -> int:
        return time.time_ns()

    def pause(self) -> None:
        time.sleep(0.0001)


class RandomSource(ABC):
    """Cryptographically secure randomness for generators."""

    @abstractmethod
    def token_bytes(self, n: int) -> bytes:
        """Return ``n`` random bytes."""
        pass

    @abstractmethod
    def randbelow(self, n: int) -> int:
        """Return a uniformly random int in ``[0, n)``."""
        pass

    def randbits(self, k: int) -> int:
        """Return a random int with ``k`` random bits."""
        return int.from_bytes(self.token_bytes((k + 7) // 8), "big") >> (-k % 8)


class SystemRandom(RandomSource):
    """Random source backed by the ``secrets`` module."""

    def token_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)

    def randbelow(self, n: int) -> int:
        return secrets.randbelow(n)


SYSTEM_CLOCK = SystemClock()
SYSTEM_RANDOM = SystemRandom()
