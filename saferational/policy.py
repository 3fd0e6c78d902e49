"""Configuration of the width and error policies used by :class:`Rational`."""
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Union

from .overflow import DEFAULT_WIDTH, bounds

LOG = logging.getLogger(__name__)


class ZeroDivisionPolicy(Enum):
    """What happens to a zero denominator or a zero divisor."""

    LENIENT = "lenient"  # substitute the zero value 0/1
    STRICT = "strict"  # raise RationalZeroDivisionError


class OverflowPolicy(Enum):
    """How fallback and comparison cross-multiplications are evaluated."""

    WIDEN = "widen"  # exact intermediates, out-of-range results raise
    WRAP = "wrap"  # two's-complement wrapping at the configured width


@dataclass(frozen=True)
class Policy:
    width: int = DEFAULT_WIDTH
    zero_division: ZeroDivisionPolicy = ZeroDivisionPolicy.LENIENT
    overflow: OverflowPolicy = OverflowPolicy.WIDEN

    def __post_init__(self) -> None:
        bounds(self.width)
        # Accept the plain string values as they appear in configuration files.
        object.__setattr__(self, "zero_division", ZeroDivisionPolicy(self.zero_division))
        object.__setattr__(self, "overflow", OverflowPolicy(self.overflow))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Policy":
        """Build a policy from a mapping such as a parsed TOML table."""
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"unknown policy option(s): {', '.join(unknown)}")
        return cls(**dict(values))


DEFAULT_POLICY = Policy()

_default_policy = DEFAULT_POLICY


def load_policy(path: Union[str, Path]) -> Policy:
    """Read a :class:`Policy` from a TOML file.

    Options are taken from a ``[rational]`` table when the file has one and
    from the top level otherwise::

        [rational]
        width = 64
        zero_division = "strict"
        overflow = "wrap"
    """
    with open(path, "rb") as f:
        params = tomllib.load(f)
    table = params.get("rational", params)
    policy = Policy.from_mapping(table)
    LOG.debug("loaded %r from %s", policy, path)
    return policy


def get_default_policy() -> Policy:
    return _default_policy


def set_default_policy(policy: Policy) -> Policy:
    """Install *policy* as the process default and return the previous one."""
    global _default_policy
    if not isinstance(policy, Policy):
        raise TypeError(f"expected a Policy, got {type(policy)!r}")
    previous = _default_policy
    _default_policy = policy
    LOG.debug("default policy set to %r", policy)
    return previous


__all__ = [
    "ZeroDivisionPolicy",
    "OverflowPolicy",
    "Policy",
    "DEFAULT_POLICY",
    "load_policy",
    "get_default_policy",
    "set_default_policy",
]
