"""Fixed-width rational numbers with overflow-aware arithmetic.

A :class:`Rational` stores a signed numerator and a positive denominator, both
constrained to the integer width of its :class:`~saferational.policy.Policy`,
and is always kept in lowest terms. Addition and multiplication first try a
reduced computation whose intermediate products are checked for overflow, and
fall back to plain cross-multiplication when that is not possible. How the
fallback is evaluated, and what a zero denominator means, is decided by the
policy rather than hard-coded.
"""
from __future__ import annotations

import logging
import math
import numbers
import operator
from typing import Any, Optional, Tuple

import numpy as np

from .errors import RationalOverflowError, RationalZeroDivisionError
from .overflow import fits, fits_unsigned, wrap, would_add_overflow, would_multiply_overflow
from .policy import OverflowPolicy, Policy, ZeroDivisionPolicy, get_default_policy

LOG = logging.getLogger(__name__)


def _ensure_int(value: Any, *, name: str) -> int:
    """Convert *value* to ``int`` when it represents an integer."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, numbers.Integral):
        return int(value)
    raise TypeError(f"{name} must be an integer, got {type(value)!r}")


class Rational:
    """Exact fraction of two fixed-width integers, kept in lowest terms."""

    __slots__ = ("_numerator", "_denominator", "_policy")
    __array_priority__ = 1000.0  # Prefer Rational semantics in NumPy expressions.

    def __init__(
        self,
        numerator: Any = 0,
        denominator: Any = 1,
        *,
        policy: Optional[Policy] = None,
    ) -> None:
        if policy is None:
            policy = get_default_policy()
        num = _ensure_int(numerator, name="numerator")
        den = _ensure_int(denominator, name="denominator")
        for value, name in ((num, "numerator"), (den, "denominator")):
            if not fits(value, policy.width):
                raise RationalOverflowError(
                    f"{name} {value} does not fit in a signed {policy.width}-bit integer"
                )

        self._numerator, self._denominator = self._normalize(num, den, policy)
        self._policy = policy

    @classmethod
    def _from_parts(cls, num: int, den: int, policy: Policy) -> "Rational":
        """Build a value from raw arithmetic results.

        Under the wrapping policy both parts are first truncated to the signed
        width, which is what handing them to a fixed-width constructor does.
        """
        if policy.overflow is OverflowPolicy.WRAP:
            wrapped_den = wrap(den, policy.width)
            if wrapped_den == 0 and den != 0 and policy.zero_division is ZeroDivisionPolicy.STRICT:
                raise RationalZeroDivisionError(
                    f"denominator {den} wraps to zero at {policy.width} bits"
                )
            num, den = wrap(num, policy.width), wrapped_den
        return cls._from_reduced(*cls._normalize(num, den, policy), policy)

    @classmethod
    def _from_reduced(cls, num: int, den: int, policy: Policy) -> "Rational":
        """Wrap parts that are already in lowest terms with a positive denominator."""
        result = cls.__new__(cls)
        result._numerator = num
        result._denominator = den
        result._policy = policy
        return result

    # ------------------------------------------------------------------
    # Properties
    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def policy(self) -> Policy:
        return self._policy

    # ------------------------------------------------------------------
    # Numeric protocol
    def __float__(self) -> float:
        return float(self._numerator) / float(self._denominator)

    def __int__(self) -> int:
        quotient = abs(self._numerator) // self._denominator
        return quotient if self._numerator >= 0 else -quotient

    def __bool__(self) -> bool:
        return self._numerator != 0

    # ------------------------------------------------------------------
    # Representation
    def to_string(self) -> str:
        """Return ``"n"`` for whole numbers and ``"n/d"`` otherwise."""
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"

    def __format__(self, format_spec: str) -> str:
        if format_spec in ("", "r", "R"):
            return str(self)
        try:
            return format(float(self), format_spec)
        except (ValueError, TypeError):
            return format(str(self), format_spec)

    # ------------------------------------------------------------------
    # Internal helpers
    @staticmethod
    def _normalize(num: int, den: int, policy: Policy) -> Tuple[int, int]:
        if den == 0:
            if policy.zero_division is ZeroDivisionPolicy.STRICT:
                raise RationalZeroDivisionError("denominator must be non-zero")
            LOG.debug("zero denominator under numerator %d, substituting 0/1", num)
            return 0, 1
        if den < 0:
            num, den = -num, -den
        if num == 0:
            return 0, 1
        gcd = math.gcd(num, den)
        num //= gcd
        den //= gcd
        if policy.overflow is OverflowPolicy.WRAP:
            # Only negating the most negative numerator can leave the range.
            return wrap(num, policy.width), den
        if not fits(num, policy.width) or not fits_unsigned(den, policy.width):
            raise RationalOverflowError(
                f"{num}/{den} does not fit in {policy.width}-bit components"
            )
        return num, den

    def _coerce_scalar(self, value: Any) -> "Rational":
        if isinstance(value, Rational):
            return value
        if isinstance(value, np.generic):  # NumPy scalars
            return self._coerce_scalar(value.item())
        if isinstance(value, numbers.Integral):
            return Rational(int(value), 1, policy=self._policy)
        raise TypeError(f"Cannot interpret {type(value)!r} as Rational")

    def _binary_operation(self, other: Any, op):
        if isinstance(other, np.ndarray):
            vectorised = np.vectorize(
                lambda x: op(self, self._coerce_scalar(x)),
                otypes=[object],
            )
            return vectorised(other)
        return op(self, self._coerce_scalar(other))

    @staticmethod
    def _combine_policy(a: "Rational", b: "Rational") -> Policy:
        if a._policy != b._policy:
            raise ValueError(
                f"cannot combine Rational values with different policies: "
                f"{a._policy!r} and {b._policy!r}"
            )
        return a._policy

    # ------------------------------------------------------------------
    # Arithmetic kernels
    @staticmethod
    def _add(x: "Rational", y: "Rational") -> "Rational":
        policy = Rational._combine_policy(x, y)
        width = policy.width
        a, b = x._numerator, x._denominator
        c, d = y._numerator, y._denominator

        gcd = math.gcd(b, d)
        reduced_b, reduced_d = b // gcd, d // gcd
        if not (
            would_multiply_overflow(a, reduced_d, width)
            or would_multiply_overflow(c, reduced_b, width)
        ):
            term1 = a * reduced_d
            term2 = c * reduced_b
            if not would_add_overflow(term1, term2, width):
                return Rational._from_parts(term1 + term2, b * reduced_d, policy)

        LOG.debug("%s + %s overflows in reduced form, using cross-multiplication", x, y)
        return Rational._from_parts(a * d + c * b, b * d, policy)

    @staticmethod
    def _negate(x: "Rational") -> "Rational":
        return Rational._from_parts(-x._numerator, x._denominator, x._policy)

    @staticmethod
    def _sub(x: "Rational", y: "Rational") -> "Rational":
        return Rational._add(x, Rational._negate(y))

    @staticmethod
    def _mul(x: "Rational", y: "Rational") -> "Rational":
        policy = Rational._combine_policy(x, y)
        width = policy.width
        a, b = x._numerator, x._denominator
        c, d = y._numerator, y._denominator

        if not (would_multiply_overflow(a, c, width) or would_multiply_overflow(b, d, width)):
            return Rational._from_parts(a * c, b * d, policy)

        LOG.debug("%s * %s overflows directly, cross-cancelling first", x, y)
        gcd1 = math.gcd(a, d)
        gcd2 = math.gcd(c, b)
        return Rational._from_parts(
            (a // gcd1) * (c // gcd2),
            (b // gcd2) * (d // gcd1),
            policy,
        )

    @staticmethod
    def _truediv(x: "Rational", y: "Rational") -> "Rational":
        policy = Rational._combine_policy(x, y)
        if y._numerator == 0:
            if policy.zero_division is ZeroDivisionPolicy.STRICT:
                raise RationalZeroDivisionError("division by zero")
            LOG.debug("%s / %s divides by zero, substituting 0/1", x, y)
            return Rational._from_parts(0, 1, policy)
        c, d = y._numerator, y._denominator
        if policy.overflow is OverflowPolicy.WRAP:
            reciprocal = Rational._from_parts(d, c, policy)
        else:
            # Swapping reduced parts keeps them reduced; only the sign moves.
            reciprocal = Rational._from_reduced(d if c > 0 else -d, abs(c), policy)
        return Rational._mul(x, reciprocal)

    # ------------------------------------------------------------------
    # Arithmetic operators
    def __add__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational._add)

    def __radd__(self, other: Any) -> Any:
        return self.__add__(other)

    def __sub__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational._sub)

    def __rsub__(self, other: Any) -> Any:
        return self._coerce_scalar(other).__sub__(self)

    def __mul__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational._mul)

    def __rmul__(self, other: Any) -> Any:
        return self.__mul__(other)

    def __truediv__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational._truediv)

    def __rtruediv__(self, other: Any) -> Any:
        return self._coerce_scalar(other).__truediv__(self)

    def __neg__(self) -> "Rational":
        return Rational._negate(self)

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        if self._numerator >= 0:
            return self
        return Rational._negate(self)

    add = __add__
    subtract = __sub__
    multiply = __mul__
    divide = __truediv__
    negate = __neg__

    # ------------------------------------------------------------------
    # Comparisons
    def _less(self, other: "Rational") -> bool:
        policy = self._combine_policy(self, other)
        left = self._numerator * other._denominator
        right = other._numerator * self._denominator
        if policy.overflow is OverflowPolicy.WRAP:
            left, right = wrap(left, policy.width), wrap(right, policy.width)
        return left < right

    def _ordering_operand(self, other: Any) -> Optional["Rational"]:
        try:
            return self._coerce_scalar(other)
        except (TypeError, RationalOverflowError):
            return None

    def __eq__(self, other: Any) -> bool:
        other_rat = self._ordering_operand(other)
        if other_rat is None:
            return False
        return (
            self._numerator == other_rat._numerator
            and self._denominator == other_rat._denominator
        )

    def __lt__(self, other: Any) -> bool:
        other_rat = self._ordering_operand(other)
        if other_rat is None:
            return NotImplemented
        return self._less(other_rat)

    def __le__(self, other: Any) -> bool:
        other_rat = self._ordering_operand(other)
        if other_rat is None:
            return NotImplemented
        return self._less(other_rat) or self == other_rat

    def __gt__(self, other: Any) -> bool:
        other_rat = self._ordering_operand(other)
        if other_rat is None:
            return NotImplemented
        return not (self._less(other_rat) or self == other_rat)

    def __ge__(self, other: Any) -> bool:
        other_rat = self._ordering_operand(other)
        if other_rat is None:
            return NotImplemented
        return not self._less(other_rat)

    def compare(self, other: Any) -> int:
        """Return ``-1``, ``0`` or ``1`` as this value is below, equal to or above *other*."""
        other_rat = self._coerce_scalar(other)
        if self._less(other_rat):
            return -1
        if self == other_rat:
            return 0
        return 1

    def __hash__(self) -> int:
        if self._denominator == 1:
            return hash(self._numerator)
        return hash((self._numerator, self._denominator))

    # ------------------------------------------------------------------
    # NumPy interoperability
    _UFUNC_DISPATCH = {
        np.add: operator.add,
        np.subtract: operator.sub,
        np.multiply: operator.mul,
        np.divide: operator.truediv,
        np.true_divide: operator.truediv,
        np.negative: operator.neg,
        np.positive: operator.pos,
        np.absolute: abs,
        np.equal: operator.eq,
        np.not_equal: operator.ne,
        np.less: operator.lt,
        np.less_equal: operator.le,
        np.greater: operator.gt,
        np.greater_equal: operator.ge,
    }

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__":
            return NotImplemented
        if kwargs.get("out") is not None:
            raise NotImplementedError("`out` argument is not supported for Rational ufuncs")
        op = self._UFUNC_DISPATCH.get(ufunc)
        if op is None:
            return NotImplemented

        coerced = []
        has_array = False
        for value in inputs:
            if isinstance(value, Rational):
                coerced.append(value)
            elif isinstance(value, np.ndarray):
                vectorised = np.vectorize(lambda x: self._coerce_scalar(x), otypes=[object])
                coerced.append(vectorised(value))
                has_array = True
            else:
                coerced.append(self._coerce_scalar(value))
        if has_array:
            vectorised = np.vectorize(lambda *args: op(*args), otypes=[object])
            return vectorised(*coerced)
        return op(*coerced)


def _as_rational(value: Any, policy: Optional[Policy]) -> Rational:
    if isinstance(value, Rational):
        if policy is not None and value.policy != policy:
            raise ValueError(f"{value!r} uses {value.policy!r}, expected {policy!r}")
        return value
    return Rational(value, 1, policy=policy)


def _policy_of(values: Any) -> Optional[Policy]:
    """Return the policy of the first :class:`Rational` found in *values*."""
    for item in np.asarray(values, dtype=object).flat:
        if isinstance(item, Rational):
            return item.policy
    return None


def as_rational_array(
    values: Any,
    *,
    policy: Optional[Policy] = None,
    copy: bool = True,
) -> np.ndarray:
    """Return a ``numpy.ndarray`` of :class:`Rational` values.

    ``values`` can be any iterable of integers and :class:`Rational` values or
    an existing NumPy array. Integers are converted under *policy* (the
    process default when ``None``); :class:`Rational` entries must already
    carry *policy* when one is given. When ``copy`` is ``False`` an object
    array is converted in place. Non-integral entries raise
    :class:`TypeError`.
    """
    if not isinstance(values, np.ndarray):
        if not isinstance(values, (list, tuple)):
            values = list(values)
        array = np.empty(len(values), dtype=object)
        array[:] = [_as_rational(item, policy) for item in values]
        return array

    array = values.astype(object, copy=copy)
    for index, item in np.ndenumerate(array):
        array[index] = _as_rational(item, policy)
    return array


def zeros(length: int, *, policy: Optional[Policy] = None) -> np.ndarray:
    """Return a one-dimensional array of length ``length`` filled with zeros."""
    if length < 0:
        raise ValueError("length must be non-negative")
    return as_rational_array([Rational(0, 1, policy=policy) for _ in range(length)])


def zeros_like(values: Any, *, policy: Optional[Policy] = None) -> np.ndarray:
    """Return a zero-filled array shaped like ``values``.

    Without an explicit *policy* the zeros take the policy of the first
    :class:`Rational` in ``values``.
    """
    if policy is None:
        policy = _policy_of(values)
    zero = Rational(0, 1, policy=policy)
    array = np.empty(np.shape(values), dtype=object)
    array.fill(zero)
    return array


__all__ = ["Rational", "as_rational_array", "zeros", "zeros_like"]
