from __future__ import annotations

import random
from bisect import bisect_right
from itertools import accumulate
from typing import Hashable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)


class EmptyWeightsError(ValueError):
    """Raised when there is nothing to draw from (no keys or zero total weight)."""


class WeightedSampler:
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def choose(self, weights: Mapping[K, float]) -> K:
        """Draw one key with probability proportional to its weight.

        Cumulative weights follow the mapping's iteration order; the draw is
        uniform in ``[0, total)`` and the first key whose running total
        exceeds it wins, so zero-weight keys are never returned.
        """
        keys = list(weights.keys())
        cumulative = list(accumulate(float(weights[key]) for key in keys))
        total = cumulative[-1] if cumulative else 0.0
        if total <= 0:
            raise EmptyWeightsError("cannot sample from an empty or zero-weight set")
        draw = self.rng.random() * total
        return keys[bisect_right(cumulative, draw)]


def choose_weighted(weights: Mapping[K, float], rng: random.Random | None = None) -> K:
    return WeightedSampler(rng).choose(weights)
