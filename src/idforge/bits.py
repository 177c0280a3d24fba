"""Big-endian bit-field packing shared by every binary format codec."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from idforge.exceptions import LayoutError


@dataclass(frozen=True)
class Field:
    """One bit field of a layout, counted from the most significant bit.

    Attributes:
        name: Field name (e.g. "timestamp", "sequence")
        offset: Bit offset from the MSB of the whole value
        width: Width in bits
        semantic: Short description of what the field holds
    """

    name: str
    offset: int
    width: int
    semantic: str = ""

    @property
    def max_value(self) -> int:
        """Largest value the field can hold."""
        return (1 << self.width) - 1


class Layout:
    """An ordered, contiguous, non-overlapping set of bit fields."""

    def __init__(self, byte_length: int, fields: Iterable[tuple[str, int, str]]):
        """Build a layout from ``(name, width, semantic)`` triples.

        Args:
            byte_length: Total length of the packed value in bytes
            fields: Field triples in MSB-first order

        Raises:
            LayoutError: If widths do not add up to ``8 * byte_length``
        """
        self.byte_length = byte_length
        self.total_bits = byte_length * 8

        offset = 0
        built: list[Field] = []
        for name, width, semantic in fields:
            if width <= 0:
                raise LayoutError(f"Field '{name}' must have a positive width")
            built.append(Field(name, offset, width, semantic))
            offset += width

        if offset != self.total_bits:
            raise LayoutError(
                f"Layout fields cover {offset} bits, expected {self.total_bits}"
            )

        names = [f.name for f in built]
        if len(set(names)) != len(names):
            raise LayoutError(f"Duplicate field names in layout: {names}")

        self.fields: tuple[Field, ...] = tuple(built)
        self._by_name = {f.name: f for f in built}

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> Field:
        return self._by_name[name]

    def shift(self, name: str) -> int:
        """Number of bits to the right of ``name``."""
        field = self._by_name[name]
        return self.total_bits - field.offset - field.width


def bytes_to_int(data: bytes) -> int:
    """Interpret ``data`` as an unsigned big-endian integer."""
    return int.from_bytes(data, "big")


def int_to_bytes(value: int, length: int) -> bytes:
    """Render ``value`` as exactly ``length`` big-endian bytes.

    Raises:
        LayoutError: If the value is negative or does not fit
    """
    if value < 0 or value.bit_length() > length * 8:
        raise LayoutError(f"Value {value} does not fit in {length} bytes")
    return value.to_bytes(length, "big")


def pack(values: Mapping[str, int], layout: Layout) -> bytes:
    """Pack field values into bytes according to ``layout``.

    Args:
        values: Field name to unsigned integer value
        layout: Target layout

    Returns:
        ``layout.byte_length`` bytes

    Raises:
        LayoutError: If a field is missing, negative or wider than its width
    """
    acc = 0
    for field in layout:
        if field.name not in values:
            raise LayoutError(f"Missing value for field '{field.name}'")
        value = values[field.name]
        if value < 0 or value > field.max_value:
            raise LayoutError(
                f"Value {value} for field '{field.name}' exceeds "
                f"{field.width}-bit range (0-{field.max_value})"
            )
        acc = (acc << field.width) | value
    return acc.to_bytes(layout.byte_length, "big")


def unpack(data: bytes, layout: Layout) -> dict[str, int]:
    """Extract every field of ``layout`` from ``data``.

    Pure bit arithmetic; total over any input of the declared length.
    """
    if len(data) != layout.byte_length:
        raise LayoutError(
            f"Expected {layout.byte_length} bytes, got {len(data)}"
        )
    acc = bytes_to_int(data)
    result: dict[str, int] = {}
    remaining = layout.total_bits
    for field in layout:
        remaining -= field.width
        result[field.name] = (acc >> remaining) & field.max_value
    return result
