"""Score providers used by the feedback and resume analyzers.

Scoring is mocked: ``RandomScoreProvider`` draws bounded random integers.
A real scoring algorithm can replace it without touching the progression
rules, which only ever see the final integer score.
"""

import random
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class ScoreProvider(ABC):
    """Capability that produces bounded integer scores and categorical picks."""

    @abstractmethod
    def score(self, low: int, high: int) -> int:
        """Return an integer score in ``[low, high]``."""

    @abstractmethod
    def choice(self, options: Sequence[T]) -> T:
        """Pick one of ``options``."""


class RandomScoreProvider(ScoreProvider):
    """Uniform random scores, seedable for reproducibility."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def score(self, low: int, high: int) -> int:
        return self._random.randint(low, high)

    def choice(self, options: Sequence[T]) -> T:
        return self._random.choice(list(options))


class FixedScoreProvider(ScoreProvider):
    """Returns preset scores in order, cycling when exhausted.

    Scores are clamped to the requested range; ``choice`` always picks the
    first option.
    """

    def __init__(self, values: Iterable[int]):
        self._values: List[int] = list(values)
        if not self._values:
            raise ValueError("FixedScoreProvider needs at least one value")
        self._position = 0

    def score(self, low: int, high: int) -> int:
        value = self._values[self._position % len(self._values)]
        self._position += 1
        return max(low, min(high, value))

    def choice(self, options: Sequence[T]) -> T:
        return list(options)[0]
