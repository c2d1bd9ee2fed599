"""Random draws used when assigning authors and categories."""
import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Seedable source of uniform draws, shared across one seeding run."""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the random source.

        Args:
            seed: Fixed seed for reproducible runs (None seeds from the OS)
        """
        self._random = random.Random(seed)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both inclusive."""
        return self._random.randint(low, high)

    def choice(self, items: Sequence[T]) -> T:
        """Uniform pick from a non-empty sequence."""
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return self._random.choice(items)
