"""Random-string generators: NanoID and CUID2."""

import hashlib
import os
import socket
import threading
from typing import Optional

from idforge.codecs.cuid import (
    BASE36_ALPHABET,
    CUID2_DEFAULT_LENGTH,
    CUID2_MAX_LENGTH,
    CUID2_MIN_LENGTH,
)
from idforge.codecs.nanoid import DEFAULT_LENGTH as NANOID_DEFAULT_LENGTH
from idforge.codecs.nanoid import URL_SAFE_ALPHABET
from idforge.encoding import int_to_text
from idforge.exceptions import GenerationError
from idforge.generators.clock import SYSTEM_CLOCK, SYSTEM_RANDOM, Clock, RandomSource
from idforge.models import RawId, TypeTag

MAX_ALPHABET_SIZE = 255
_LETTERS = "abcdefghijklmnopqrstuvwxyz"


def validate_alphabet(alphabet: str) -> None:
    """Check a NanoID alphabet.

    Raises:
        GenerationError: If the alphabet is empty, too long, has duplicates
            or contains non-printable or non-ASCII characters
    """
    if not alphabet:
        raise GenerationError("NanoID alphabet must not be empty")
    if len(alphabet) > MAX_ALPHABET_SIZE:
        raise GenerationError(
            f"NanoID alphabet has {len(alphabet)} characters, maximum is {MAX_ALPHABET_SIZE}"
        )
    if len(set(alphabet)) != len(alphabet):
        raise GenerationError("NanoID alphabet characters must be unique")
    if not (alphabet.isascii() and alphabet.isprintable()) or " " in alphabet:
        raise GenerationError("NanoID alphabet must be printable ASCII without spaces")


def nanoid(
    alphabet: str = URL_SAFE_ALPHABET,
    length: int = NANOID_DEFAULT_LENGTH,
    rng: RandomSource = SYSTEM_RANDOM,
) -> RawId:
    """Generate a NanoID.

    Each character is an unbiased draw from ``alphabet``.

    Args:
        alphabet: 1-255 unique printable ASCII characters
        length: Number of characters (at least 1)
        rng: Random source

    Raises:
        GenerationError: On an invalid alphabet or length
    """
    validate_alphabet(alphabet)
    if length < 1:
        raise GenerationError(f"NanoID length must be at least 1, got {length}")
    size = len(alphabet)
    text = "".join(alphabet[rng.randbelow(size)] for _ in range(length))
    return RawId(TypeTag.NANOID, text.encode("ascii"))


def _sha3_base36(text: str) -> str:
    digest = hashlib.sha3_512(text.encode("utf-8")).digest()
    # drop the first digit, which is biased towards low values
    return int_to_text(int.from_bytes(digest, "big"), BASE36_ALPHABET)[1:]


class Cuid2Generator:
    """CUID2 generator.

    The body is a SHA3-512 hash over the time, fresh entropy, a session
    counter and a host fingerprint, rendered in base36. The first character
    is a random letter.
    """

    # the session counter starts somewhere in the first ~476M values
    INITIAL_COUNTER_RANGE = 476782367

    def __init__(self, clock: Clock = SYSTEM_CLOCK, rng: RandomSource = SYSTEM_RANDOM):
        self.clock = clock
        self.rng = rng
        self.counter = rng.randbelow(self.INITIAL_COUNTER_RANGE)
        self.fingerprint = _sha3_base36(
            f"{socket.gethostname()}{os.getpid()}{self._entropy(CUID2_MAX_LENGTH)}"
        )[:CUID2_MAX_LENGTH]
        self._lock = threading.Lock()

    def _entropy(self, length: int) -> str:
        return "".join(BASE36_ALPHABET[self.rng.randbelow(36)] for _ in range(length))

    def generate(self, length: Optional[int] = None) -> RawId:
        """Generate a CUID2.

        Args:
            length: Total length, 2-32 (default 24)

        Raises:
            GenerationError: If ``length`` is out of range
        """
        length = CUID2_DEFAULT_LENGTH if length is None else length
        if not CUID2_MIN_LENGTH <= length <= CUID2_MAX_LENGTH:
            raise GenerationError(
                f"CUID2 length must be between {CUID2_MIN_LENGTH} and "
                f"{CUID2_MAX_LENGTH}, got {length}"
            )
        with self._lock:
            self.counter += 1
            counter = self.counter
        first = _LETTERS[self.rng.randbelow(len(_LETTERS))]
        body = _sha3_base36(
            int_to_text(self.clock.now_ms(), BASE36_ALPHABET)
            + self._entropy(length)
            + int_to_text(counter, BASE36_ALPHABET)
            + self.fingerprint
        )
        return RawId(TypeTag.CUID2, (first + body[: length - 1]).encode("ascii"))
