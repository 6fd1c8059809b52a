"""
State machine for card learning phases.

Maps (current state, rating) to a move, then resolves the move against the
configured learning/relearning steps. Short-term moves carry a fixed delay;
moves into or within Review carry no delay and are scheduled by the memory
model and interval calculator instead.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from cadence.domain.models import Rating, State


class Move(Enum):
    RESTART_STEPS = "restart_steps"  # back to step 0
    REPEAT_STEP = "repeat_step"  # same step, same delay
    ADVANCE_STEP = "advance_step"  # next step, or graduate when none remain
    GRADUATE = "graduate"  # skip remaining steps
    LAPSE = "lapse"  # forgotten in Review
    RECALL = "recall"  # remembered in Review


TRANSITIONS: dict[State, dict[Rating, Move]] = {
    State.NEW: {
        Rating.AGAIN: Move.RESTART_STEPS,
        Rating.HARD: Move.RESTART_STEPS,
        Rating.GOOD: Move.ADVANCE_STEP,
        Rating.EASY: Move.GRADUATE,
    },
    State.LEARNING: {
        Rating.AGAIN: Move.RESTART_STEPS,
        Rating.HARD: Move.REPEAT_STEP,
        Rating.GOOD: Move.ADVANCE_STEP,
        Rating.EASY: Move.GRADUATE,
    },
    State.REVIEW: {
        Rating.AGAIN: Move.LAPSE,
        Rating.HARD: Move.RECALL,
        Rating.GOOD: Move.RECALL,
        Rating.EASY: Move.RECALL,
    },
    State.RELEARNING: {
        Rating.AGAIN: Move.RESTART_STEPS,
        Rating.HARD: Move.REPEAT_STEP,
        Rating.GOOD: Move.ADVANCE_STEP,
        Rating.EASY: Move.GRADUATE,
    },
}


def _check_exhaustive() -> None:
    missing = [
        (state.name, rating.name)
        for state in State
        for rating in Rating
        if rating not in TRANSITIONS.get(state, {})
    ]
    if missing:
        raise RuntimeError(f"Transition table is missing {missing}")


_check_exhaustive()


@dataclass(frozen=True)
class Transition:
    """
    Resolved outcome of a rating.

    Attributes:
        move: The table entry that produced this transition.
        state: State after the review.
        step: Step index after the review, None once in Review.
        delay: Fixed step delay, or None when the interval comes from stability.
    """

    move: Move
    state: State
    step: int | None
    delay: timedelta | None

    @property
    def is_long_term(self) -> bool:
        return self.delay is None


def _graduate(move: Move) -> Transition:
    return Transition(move=move, state=State.REVIEW, step=None, delay=None)


def next_transition(
    state: State,
    rating: Rating,
    step: int | None,
    learning_steps: tuple[timedelta, ...],
    relearning_steps: tuple[timedelta, ...],
) -> Transition:
    """
    Decide where a card goes after `rating`.

    Args:
        state: Current state of the card.
        rating: The rating just given.
        step: Current step index (ignored outside Learning/Relearning).
        learning_steps: Delays for New/Learning cards.
        relearning_steps: Delays for Relearning cards and lapses.
    """
    move = TRANSITIONS[state][rating]

    if move is Move.RECALL or move is Move.GRADUATE:
        return _graduate(move)

    if move is Move.LAPSE:
        if not relearning_steps:
            return _graduate(move)
        return Transition(move, State.RELEARNING, 0, relearning_steps[0])

    if state is State.RELEARNING:
        phase, steps = State.RELEARNING, relearning_steps
    else:
        phase, steps = State.LEARNING, learning_steps

    if not steps:
        return _graduate(move)

    # Step lists can shrink between reviews when configuration changes.
    current = min(step or 0, len(steps) - 1)

    if move is Move.RESTART_STEPS:
        target = 0
    elif move is Move.REPEAT_STEP:
        target = current
    elif state is State.NEW:
        # A first Good skips the opening step when there is a later one.
        target = min(1, len(steps) - 1)
    else:
        target = current + 1
        if target >= len(steps):
            return _graduate(move)

    return Transition(move, phase, target, steps[target])
