"""Overflow-aware fixed-width rational numbers."""

from .errors import RationalError, RationalOverflowError, RationalZeroDivisionError
from .overflow import (
    INT64_MAX,
    INT64_MIN,
    would_add_overflow,
    would_multiply_overflow,
)
from .policy import (
    DEFAULT_POLICY,
    OverflowPolicy,
    Policy,
    ZeroDivisionPolicy,
    get_default_policy,
    load_policy,
    set_default_policy,
)
from .rational import Rational, as_rational_array, zeros, zeros_like

__all__ = [
    "Rational",
    "as_rational_array",
    "zeros",
    "zeros_like",
    "Policy",
    "ZeroDivisionPolicy",
    "OverflowPolicy",
    "DEFAULT_POLICY",
    "load_policy",
    "get_default_policy",
    "set_default_policy",
    "RationalError",
    "RationalOverflowError",
    "RationalZeroDivisionError",
    "INT64_MIN",
    "INT64_MAX",
    "would_add_overflow",
    "would_multiply_overflow",
]
