"""
Exceptions raised by the simulation engine.
All of them are raised before any engine state is touched.
"""

import math


class SimulationError(Exception):
    """Base class for simulation errors."""


class InvalidRateError(SimulationError, ValueError):
    """A rate or speed parameter that is not a positive finite number."""

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"{name} must be a positive finite number, got {value!r}")


class DegenerateAdvanceError(SimulationError, ValueError):
    """A negative or non-finite time delta passed to advance()."""

    def __init__(self, delta):
        self.delta = delta
        super().__init__(f"advance delta must be a non-negative finite number, got {delta!r}")


def check_rate(name: str, value) -> float:
    """Validate a positive rate and return it as a float.

    Args:
        name: Parameter name used in the error message
        value: Candidate value

    Returns:
        The value as float

    Raises:
        InvalidRateError: if the value is not a positive finite real
    """
    try:
        rate = float(value)
    except (TypeError, ValueError):
        raise InvalidRateError(name, value) from None
    if not math.isfinite(rate) or rate <= 0:
        raise InvalidRateError(name, value)
    return rate
