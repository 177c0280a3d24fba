"""Compare two identifiers under binary, lexicographic and chronological order."""

import logging
from datetime import timedelta
from typing import Optional

from idforge.codecs.registry import REGISTRY, CodecRegistry
from idforge.models import ComparisonResult, Order, RawId, Timestamp

logger = logging.getLogger(__name__)


def _timestamp(raw: RawId, registry: CodecRegistry) -> Optional[Timestamp]:
    codec = registry.get(raw.tag)
    if codec.decode_fields is None or not codec.descriptor.has_timestamp:
        return None
    return codec.decode_fields(raw).timestamp


def compare(a: RawId, b: RawId, registry: CodecRegistry = REGISTRY) -> ComparisonResult:
    """Compare two identifiers.

    Binary order compares the raw bytes as unsigned values (a strict prefix
    sorts first). Lexicographic order compares canonical text. Chronological
    order and the time difference are only reported when both identifiers
    carry a timestamp; the difference is exact in nanoseconds.

    Args:
        a: First identifier
        b: Second identifier
        registry: Codec registry used for rendering and field decoding

    Returns:
        ComparisonResult
    """
    warnings: list[str] = []
    type_mismatch = a.tag is not b.tag
    if type_mismatch:
        message = f"Comparing different ID types: {a.tag} vs {b.tag}"
        logger.warning(message)
        warnings.append(message)

    binary = Order.of(a.data, b.data)
    text_a = registry.get(a.tag).to_canonical(a)
    text_b = registry.get(b.tag).to_canonical(b)
    lexicographic = Order.of(text_a, text_b)

    ts_a = _timestamp(a, registry)
    ts_b = _timestamp(b, registry)
    if ts_a is None or ts_b is None:
        return ComparisonResult(
            binary_order=binary,
            lexicographic_order=lexicographic,
            type_mismatch=type_mismatch,
            warnings=tuple(warnings),
        )

    diff_ns = abs(ts_a.unix_ns - ts_b.unix_ns)
    return ComparisonResult(
        binary_order=binary,
        lexicographic_order=lexicographic,
        chronological_order=Order.of(ts_a.unix_ns, ts_b.unix_ns),
        time_diff=timedelta(microseconds=diff_ns // 1000),
        time_diff_ns=diff_ns,
        type_mismatch=type_mismatch,
        warnings=tuple(warnings),
    )
