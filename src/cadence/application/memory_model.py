"""
Memory model: stability, difficulty and retrievability.

This is a pure computation module with no I/O. All formulas follow the
FSRS v4 model; the coefficients come from the weight vector of a
Parameters value.
"""

import logging
import math

from cadence.domain.constants import (
    DECAY,
    DIFFICULTY_MAX,
    DIFFICULTY_MIN,
    FACTOR,
    LAPSE_STABILITY_MAX_RATIO,
    STABILITY_MIN,
)
from cadence.domain.models import Rating

logger = logging.getLogger(__name__)


def retrievability(elapsed_days: float, stability: float) -> float:
    """
    Probability of recall after `elapsed_days` for a memory of the given stability.

    R = (1 + t / (9 * S)) ^ -1, so R(0, S) = 1 and R(S, S) = 0.9.
    """
    stability = max(stability, STABILITY_MIN)
    elapsed_days = max(elapsed_days, 0.0)
    return (1.0 + FACTOR * elapsed_days / stability) ** DECAY


def clamp_difficulty(difficulty: float) -> float:
    return min(max(difficulty, DIFFICULTY_MIN), DIFFICULTY_MAX)


class MemoryModel:
    """
    Computes initial and updated memory state from ratings.

    Stateless apart from the immutable weight vector.
    """

    def __init__(self, weights: tuple[float, ...]):
        self.w = weights

    def initial_stability(self, rating: Rating) -> float:
        """Stability after the first-ever review, one weight per rating."""
        return max(self.w[rating - 1], STABILITY_MIN)

    def initial_difficulty(self, rating: Rating) -> float:
        """Difficulty after the first-ever review: D0 = w4 - w5 * (G - 3)."""
        return clamp_difficulty(self.w[4] - self.w[5] * (rating - 3))

    def next_difficulty(self, difficulty: float, rating: Rating) -> float:
        """
        Apply the rating delta, then mean-revert toward D0(Easy).

        D' = w7 * D0(Easy) + (1 - w7) * (D - w6 * (G - 3))
        """
        shifted = difficulty - self.w[6] * (rating - 3)
        anchor = self.initial_difficulty(Rating.EASY)
        reverted = self.w[7] * anchor + (1.0 - self.w[7]) * shifted
        clamped = clamp_difficulty(reverted)
        if clamped != reverted:
            logger.debug(f"Difficulty {reverted:.4f} clamped to {clamped}")
        return clamped

    def next_stability_on_recall(
        self,
        stability: float,
        difficulty: float,
        retrievability: float,
        rating: Rating,
    ) -> float:
        """
        Stability after a successful recall (Hard/Good/Easy) in Review.

        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * penalty * bonus)

        The gain grows as difficulty falls and as retrievability falls, so
        recalling an item that was close to being forgotten counts most.
        """
        if rating == Rating.AGAIN:
            raise ValueError("Use next_stability_on_lapse for Again ratings")

        hard_penalty = self.w[15] if rating == Rating.HARD else 1.0
        easy_bonus = self.w[16] if rating == Rating.EASY else 1.0
        stability = max(stability, STABILITY_MIN)

        gain = (
            math.exp(self.w[8])
            * (11.0 - difficulty)
            * stability ** -self.w[9]
            * (math.exp(self.w[10] * (1.0 - retrievability)) - 1.0)
            * hard_penalty
            * easy_bonus
        )
        # Floating point can leave (e^x - 1) a hair below zero at R == 1.
        return stability * (1.0 + max(gain, 0.0))

    def next_stability_on_lapse(
        self,
        stability: float,
        difficulty: float,
        retrievability: float,
    ) -> float:
        """
        Stability after forgetting a card in Review.

        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R)),
        kept strictly below the previous stability and never below STABILITY_MIN.
        """
        forgotten = (
            self.w[11]
            * difficulty ** -self.w[12]
            * ((stability + 1.0) ** self.w[13] - 1.0)
            * math.exp(self.w[14] * (1.0 - retrievability))
        )
        bounded = max(min(forgotten, stability * LAPSE_STABILITY_MAX_RATIO), STABILITY_MIN)
        if bounded != forgotten:
            logger.debug(f"Lapse stability {forgotten:.4f} bounded to {bounded:.4f}")
        return bounded
