"""Shared fixtures: deterministic clock and random source."""

import pytest

from idforge.generators.clock import Clock, RandomSource


class FakeClock(Clock):
    """Clock that only moves when told to.

    ``pause()`` advances by ``pause_step_ns`` so code waiting for the next
    millisecond terminates.
    """

    def __init__(self, ms: int = 1_700_000_000_000, pause_step_ns: int = 1_000_000):
        self.ns = ms * 1_000_000
        self.pause_step_ns = pause_step_ns
        self.pauses = 0

    def now_ns(self) -> int:
        return self.ns

    def pause(self) -> None:
        self.pauses += 1
        self.ns += self.pause_step_ns

    def set_ms(self, ms: int) -> None:
        self.ns = ms * 1_000_000

    def advance_ms(self, ms: int = 1) -> None:
        self.ns += ms * 1_000_000


class FakeRandom(RandomSource):
    """Random source returning a fixed byte (repeated) and fixed draws."""

    def __init__(self, byte: int = 0x42, below: int = 0):
        self.byte = byte
        self.below = below

    def token_bytes(self, n: int) -> bytes:
        return bytes([self.byte]) * n

    def randbelow(self, n: int) -> int:
        return min(self.below, n - 1)


class SteppingRandom(RandomSource):
    """Random source whose n-th call returns bytes all equal to n."""

    def __init__(self):
        self.calls = 0

    def token_bytes(self, n: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * n

    def randbelow(self, n: int) -> int:
        self.calls += 1
        return self.calls % n


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock fixed at 2023-11-14T22:13:20Z."""
    return FakeClock()


@pytest.fixture
def fake_random() -> FakeRandom:
    """Random source returning 0x42 bytes."""
    return FakeRandom()


@pytest.fixture
def stepping_random() -> SteppingRandom:
    """Random source returning a different value on every call."""
    return SteppingRandom()
