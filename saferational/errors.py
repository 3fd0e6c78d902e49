"""Exceptions raised by :mod:`saferational` when a policy asks for them."""


class RationalError(ArithmeticError):
    """Base class for errors raised by :class:`~saferational.Rational`."""


class RationalZeroDivisionError(RationalError, ZeroDivisionError):
    """A zero denominator or zero divisor under the strict policy."""


class RationalOverflowError(RationalError, OverflowError):
    """A component that does not fit the configured integer width."""


__all__ = ["RationalError", "RationalZeroDivisionError", "RationalOverflowError"]
