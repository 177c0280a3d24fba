"""Custom exceptions with helpful error messages."""

from collections.abc import Sequence


class IdForgeError(Exception):
    """Base exception for idforge errors."""

    pass


class UnknownTypeError(IdForgeError, ValueError):
    """ID type name is not recognized."""

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        message = f"Unknown ID type: '{name}'."
        if available:
            message += f"\n\nAvailable: {', '.join(available)}"
        super().__init__(message)


class StructuralMismatchError(IdForgeError, ValueError):
    """Text does not fit the requested (or any) identifier format."""

    def __init__(self, message: str, hint: str | None = None):
        self.reason = message
        self.hint = hint
        if hint:
            message = f"{message}\n\nHint: {hint}"
        super().__init__(message)


class NoRecognizedFormatError(StructuralMismatchError):
    """Auto-detection found no format matching the input."""

    def __init__(self, text: str, hint: str | None = None):
        self.text = text
        super().__init__(f"Could not determine ID type of '{text}'.", hint)


class AmbiguousMatchError(IdForgeError):
    """More than one format matches the input."""

    def __init__(self, text: str, candidates: Sequence[object]):
        self.text = text
        self.candidates = list(candidates)
        names = ", ".join(str(candidate) for candidate in self.candidates)
        super().__init__(
            f"'{text}' matches several ID types: {names}.\n\n"
            f"Suggestions:\n"
            f"1. Pass a type hint to pick one, e.g. --type {self.candidates[0]}\n"
            f"2. Use strict mode to reject non-canonical spellings"
        )


class EncodeError(IdForgeError):
    """Requested encoding or case transformation cannot be produced."""

    pass


class DecodeError(IdForgeError, ValueError):
    """Text is not a valid value in the requested encoding."""

    def __init__(self, encoding: str, message: str):
        self.encoding = encoding
        super().__init__(f"Invalid {encoding}: {message}")


class LayoutError(IdForgeError, ValueError):
    """A field value does not fit its bit width, or a byte length is wrong."""

    pass


class FieldAccessError(LookupError):
    """A field was requested from a format that does not define it.

    This is a programming error rather than bad input: callers should check
    ``FormatDescriptor.has_timestamp`` (or the layout) first.
    """

    pass


class GenerationError(IdForgeError):
    """ID generation failed."""

    pass


class ClockMovedBackwardsError(GenerationError):
    """The clock reading went backwards between two generation calls."""

    def __init__(self, last_ms: int, now_ms: int):
        self.last_ms = last_ms
        self.now_ms = now_ms
        super().__init__(
            f"Clock moved backwards by {last_ms - now_ms} ms "
            f"(last={last_ms}, now={now_ms}). Refusing to generate ID.\n\n"
            f"Suggestions:\n"
            f"1. Retry once the clock has caught up\n"
            f"2. Check NTP adjustments on this host"
        )


class RandomOverflowError(GenerationError):
    """The random component of a monotonic ID ran out within one millisecond."""

    def __init__(self, timestamp_ms: int):
        self.timestamp_ms = timestamp_ms
        super().__init__(
            f"Random component overflowed within millisecond {timestamp_ms}. "
            f"Wait for the next millisecond and retry."
        )
