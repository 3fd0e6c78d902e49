"""Fixed-width integer bounds and overflow predicates.

The predicates are meant to be evaluated *before* an operation is carried
out, so callers can branch to a fallback path instead of producing a value
that does not fit the configured width.
"""
from __future__ import annotations

import numbers
from typing import Tuple

import numpy as np

DEFAULT_WIDTH = 64

_SIGNED_DTYPES = {8: np.int8, 16: np.int16, 32: np.int32, 64: np.int64}
_UNSIGNED_DTYPES = {8: np.uint8, 16: np.uint16, 32: np.uint32, 64: np.uint64}

SUPPORTED_WIDTHS = tuple(sorted(_SIGNED_DTYPES))


def _dtype_for(width: int, table: dict):
    if isinstance(width, bool) or not isinstance(width, numbers.Integral):
        raise ValueError(f"width must be one of {SUPPORTED_WIDTHS}, got {width!r}")
    try:
        return table[int(width)]
    except KeyError:
        raise ValueError(f"width must be one of {SUPPORTED_WIDTHS}, got {width!r}") from None


def bounds(width: int = DEFAULT_WIDTH) -> Tuple[int, int]:
    """Return ``(min, max)`` of a signed integer of *width* bits."""
    info = np.iinfo(_dtype_for(width, _SIGNED_DTYPES))
    return int(info.min), int(info.max)


def unsigned_max(width: int = DEFAULT_WIDTH) -> int:
    """Return the largest unsigned integer of *width* bits."""
    return int(np.iinfo(_dtype_for(width, _UNSIGNED_DTYPES)).max)


INT64_MIN, INT64_MAX = bounds(64)
UINT64_MAX = unsigned_max(64)


def fits(value: int, width: int = DEFAULT_WIDTH) -> bool:
    low, high = bounds(width)
    return low <= value <= high


def fits_unsigned(value: int, width: int = DEFAULT_WIDTH) -> bool:
    return 0 <= value <= unsigned_max(width)


def wrap(value: int, width: int = DEFAULT_WIDTH) -> int:
    """Reduce *value* to the two's-complement range of *width* bits."""
    _dtype_for(width, _SIGNED_DTYPES)
    modulus = 1 << width
    value &= modulus - 1
    if value >= modulus >> 1:
        value -= modulus
    return value


def would_multiply_overflow(a: int, b: int, width: int = DEFAULT_WIDTH) -> bool:
    """Return ``True`` when ``a * b`` is not representable in *width* bits.

    Zero operands never overflow. ``MIN * -1`` (in either order) does, since
    the negation of the most negative value has no signed representation.
    """
    if a == 0 or b == 0:
        return False
    low, high = bounds(width)
    if (a == low and b == -1) or (b == low and a == -1):
        return True
    return not low <= a * b <= high


def would_add_overflow(a: int, b: int, width: int = DEFAULT_WIDTH) -> bool:
    """Return ``True`` when ``a + b`` is not representable in *width* bits.

    Overflow is read off the sign of the wrapped sum: it happens only when
    both operands share a sign and the sum does not.
    """
    result = wrap(a + b, width)
    if a > 0 and b > 0:
        return result < 0
    if a < 0 and b < 0:
        return result >= 0
    return False


__all__ = [
    "DEFAULT_WIDTH",
    "SUPPORTED_WIDTHS",
    "INT64_MIN",
    "INT64_MAX",
    "UINT64_MAX",
    "bounds",
    "unsigned_max",
    "fits",
    "fits_unsigned",
    "wrap",
    "would_multiply_overflow",
    "would_add_overflow",
]
