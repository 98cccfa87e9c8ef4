# duell/core/selection.py
"""
Rating-weighted question selection.

Each candidate gets ``weight = average_rating + WEIGHT_OFFSET``, where questions
nobody has rated yet count as ``NEUTRAL_RATING``. With ratings in 1..5 the
weights stay within 3..7, so even the worst-rated question keeps a chance.

The draw itself is the cumulative-weight walk: pick ``r`` uniformly in
``[0, total_weight)`` and subtract weights in input order until ``r <= 0``.
Randomness is game fairness only, so ``random`` (not ``secrets``) is fine.
"""

import random
from dataclasses import dataclass
from typing import Hashable, Optional, Sequence

from duell.core.constants import NEUTRAL_RATING, WEIGHT_OFFSET


@dataclass(frozen=True)
class RatedQuestion:
    id: Hashable
    rating_sum: int = 0
    rating_count: int = 0

    @property
    def average_rating(self) -> float:
        if self.rating_count > 0:
            return self.rating_sum / self.rating_count
        return NEUTRAL_RATING


def question_weight(question: RatedQuestion) -> float:
    return question.average_rating + WEIGHT_OFFSET


def select_weighted(candidates: Sequence[RatedQuestion], rng: Optional[random.Random] = None) -> Optional[Hashable]:
    """Draw one candidate id with probability proportional to its weight.

    Returns None for an empty pool; that is the normal "no more questions" case.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0].id

    weights = [question_weight(q) for q in candidates]
    total_weight = sum(weights)
    r = (rng or random).random() * total_weight

    for question, weight in zip(candidates, weights):
        r -= weight
        if r <= 0:
            return question.id
    # float drift can leave a tiny positive remainder
    return candidates[-1].id
