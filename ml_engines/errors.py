"""
Error kinds raised by the algorithm engines.

Mathematical edge cases (empty clusters, zero-probability classes, nodes
without a useful split) are handled by policy inside the engines and never
raise. Only configuration that falls outside an engine's domain does.
"""

from typing import Any


class InvalidParameter(ValueError):
    """A configuration value is outside the range an engine accepts."""

    def __init__(self, name: str, value: Any, reason: str):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid parameter {name}={value!r}: {reason}")


def check_positive(name: str, value: float) -> float:
    """Reject values that are not strictly positive."""
    if not value > 0:
        raise InvalidParameter(name, value, "must be > 0")
    return value


def check_at_least(name: str, value: int, minimum: int) -> int:
    """Reject integers below ``minimum``."""
    if int(value) != value:
        raise InvalidParameter(name, value, "must be an integer")
    if value < minimum:
        raise InvalidParameter(name, value, f"must be >= {minimum}")
    return int(value)


def check_fraction(name: str, value: float) -> float:
    """Reject ratios outside (0, 1]."""
    if not 0 < value <= 1:
        raise InvalidParameter(name, value, "must be in (0, 1]")
    return value


def check_choice(name: str, value: str, choices) -> str:
    """Reject values that are not one of ``choices``."""
    if value not in choices:
        raise InvalidParameter(name, value, f"must be one of {sorted(choices)}")
    return value
