"""Injectable random sources.

Every random draw in the engine (damage rolls, opponent move choice,
opponent selection, stat jitter, AI gem pools) goes through a RandomSource
passed in by the caller, so tests can be deterministic without touching
global state.

Example:
    >>> rng = SeededRandom(seed=42)
    >>> 10 <= roll_int(rng, 10, 34) <= 34
    True
"""

from __future__ import annotations

import math
import random
from typing import Protocol, Sequence, TypeVar, runtime_checkable

from petbattle.core.exceptions import ValidationError
from petbattle.core.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Anything that yields floats uniformly distributed in [0, 1)."""

    def random(self) -> float: ...


class SeededRandom:
    """RandomSource backed by a private random.Random instance."""

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the source.

        Args:
            seed: Optional seed for reproducible sequences.
        """
        self._seed = seed
        self._random = random.Random(seed)
        logger.debug("SeededRandom initialized", seed=seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def random(self) -> float:
        return self._random.random()


class ConstantRandom:
    """RandomSource that always returns the same value."""

    def __init__(self, value: float = 0.0) -> None:
        if not 0.0 <= value < 1.0:
            raise ValidationError(
                "Constant random value must be in [0, 1)",
                field_name="value",
                invalid_value=value,
            )
        self._value = value

    def random(self) -> float:
        return self._value


def roll_int(rng: RandomSource, low: int, high: int) -> int:
    """Draw a uniform integer in [low, high] inclusive.

    Args:
        rng: Source of randomness.
        low: Smallest possible result.
        high: Largest possible result.

    Returns:
        An integer between low and high.
    """
    if high < low:
        low, high = high, low
    value = math.floor(rng.random() * (high - low + 1)) + low
    return min(value, high)


def choose(rng: RandomSource, items: Sequence[T]) -> T:
    """Pick one item uniformly at random.

    Raises:
        ValidationError: If items is empty.
    """
    if not items:
        raise ValidationError("Cannot choose from an empty sequence", field_name="items")
    index = min(math.floor(rng.random() * len(items)), len(items) - 1)
    return items[index]


_default_source: RandomSource | None = None


def default_random_source() -> RandomSource:
    """Process-wide unseeded source used when none is injected."""
    global _default_source  # noqa: PLW0603
    if _default_source is None:
        _default_source = SeededRandom()
    return _default_source


__all__ = [
    "RandomSource",
    "SeededRandom",
    "ConstantRandom",
    "roll_int",
    "choose",
    "default_random_source",
]
