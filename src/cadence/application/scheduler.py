"""
Scheduler: the public entry point of the engine.

Orchestrates the state machine, memory model and interval calculator to
answer "given this card and this rating, what comes next". Every call is a
pure transform: the input card is never mutated and the scheduler holds no
mutable state, so one instance can serve any number of threads.
"""

import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from cadence.domain.constants import DIFFICULTY_MAX, DIFFICULTY_MIN
from cadence.domain.errors import (
    InvalidCard,
    InvalidRating,
    InvalidTimestamp,
    MalformedParameterSet,
)
from cadence.domain.models import Card, Rating, ReviewLog, SchedulingInfo, State
from cadence.domain.parameters import Parameters

from .intervals import IntervalCalculator
from .memory_model import MemoryModel, retrievability
from .state_machine import Move, Transition, next_transition

logger = logging.getLogger(__name__)

_RECALL_RATINGS = (Rating.HARD, Rating.GOOD, Rating.EASY)


def _coerce_parameters(parameters: Parameters | Mapping[str, Any] | None) -> Parameters:
    if parameters is None:
        return Parameters()
    raw = parameters.model_dump() if isinstance(parameters, Parameters) else dict(parameters)
    try:
        # Re-validate even Parameters instances: model_construct() skips validation.
        return Parameters.model_validate(raw)
    except ValueError as e:
        raise MalformedParameterSet(f"Invalid parameter set: {e}") from e


def _check_rating(rating: Any) -> Rating:
    if isinstance(rating, bool):
        raise InvalidRating(rating)
    try:
        return Rating(rating)
    except (ValueError, TypeError) as e:
        raise InvalidRating(rating) from e


class Scheduler:
    """
    Schedules reviews for one immutable parameter set.

    Args:
        parameters: A Parameters value or a mapping of its fields. Defaults
            to the reference parameter set.
        seed: Optional seed making fuzz reproducible. Each call derives its
            own generator from the seed, the card and the review time.

    Raises:
        MalformedParameterSet: If the parameters do not validate.
    """

    def __init__(
        self,
        parameters: Parameters | Mapping[str, Any] | None = None,
        *,
        seed: int | None = None,
    ):
        self.parameters = _coerce_parameters(parameters)
        self.seed = seed
        self.model = MemoryModel(self.parameters.weights)
        self.intervals = IntervalCalculator(self.parameters)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def schedule(
        self,
        card: Card,
        rating: Rating | int,
        now: datetime | None = None,
        *,
        duration: timedelta | None = None,
        rng: random.Random | None = None,
    ) -> tuple[Card, ReviewLog]:
        """
        Apply one rating to a card.

        Args:
            card: Current state of the card (not modified).
            rating: Again/Hard/Good/Easy, as Rating or 1-4.
            now: Review time, timezone-aware. Defaults to the current UTC time.
            duration: Time spent answering, copied into the log.
            rng: Random source for fuzz. Overrides the scheduler seed.

        Returns:
            The updated card and the review log for this event.

        Raises:
            InvalidRating: If the rating is not 1-4.
            InvalidTimestamp: If `now` is naive or precedes the last review.
            InvalidCard: If the state is unknown, or a reviewed card has no memory
                state or one outside its bounds (stability > 0, difficulty 1-10).
        """
        rating = _check_rating(rating)
        card = self._check_card(card)
        now = self._check_now(card, now)

        if rng is None:
            rng = self._rng_for(card, now)

        info = self._review(card, rating, now, duration, rng.random())
        logger.debug(
            f"Card {card.card_id}: {card.state.name} -> {info.card.state.name} "
            f"(rating={rating.name}, scheduled={info.card.scheduled_days}d, "
            f"S={info.card.stability:.4f}, D={info.card.difficulty:.4f})"
        )
        return info.card, info.review_log

    def preview_all(self, card: Card, now: datetime | None = None) -> dict[Rating, SchedulingInfo]:
        """
        Outcome of every possible rating, for "next interval" hints.

        Nothing is mutated. Each entry matches what `schedule` returns for
        that rating at the same `now` when fuzz is disabled or the
        scheduler is seeded. All four outcomes share one fuzz draw, so the
        Hard, Good and Easy intervals keep their order.
        """
        card = self._check_card(card)
        now = self._check_now(card, now)
        fuzz_factor = self._rng_for(card, now).random()
        return {rating: self._review(card, rating, now, None, fuzz_factor) for rating in Rating}

    def retrievability(self, card: Card, now: datetime | None = None) -> float | None:
        """
        Current probability of recall, or None for a card never reviewed.

        Raises:
            InvalidCard: If the card breaks its state or memory-state bounds.
        """
        card = self._check_card(card)
        if card.state is State.NEW or card.stability is None or card.last_review is None:
            return None
        now = self._check_now(card, now)
        return retrievability((now - card.last_review).days, card.stability)

    def replay(
        self,
        reviews: Iterable[tuple],
        *,
        card_id: int | None = None,
    ) -> tuple[Card, list[ReviewLog]]:
        """
        Rebuild a card by folding its reviews over a new card.

        Args:
            reviews: `(rating, reviewed_at)` or `(rating, reviewed_at, duration)`
                tuples, oldest first.
            card_id: Identifier for the rebuilt card.

        Returns:
            The final card and one log per review.
        """
        card: Card | None = None
        logs: list[ReviewLog] = []

        for rating, reviewed_at, *rest in reviews:
            if card is None:
                card = Card(card_id=card_id, due=reviewed_at)
            card, log = self.schedule(
                card, rating, reviewed_at, duration=rest[0] if rest else None
            )
            logs.append(log)

        return (card if card is not None else Card(card_id=card_id)), logs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_now(self, card: Card, now: datetime | None) -> datetime:
        if now is None:
            now = datetime.now(timezone.utc)
        if now.tzinfo is None or now.utcoffset() is None:
            raise InvalidTimestamp(f"Review time must be timezone-aware, got {now!r}")
        if card.last_review is not None:
            if card.last_review.tzinfo is None:
                raise InvalidTimestamp(
                    f"Card {card.card_id} has a naive last_review {card.last_review!r}"
                )
            if now < card.last_review:
                raise InvalidTimestamp(
                    f"Review time {now.isoformat()} is earlier than last review "
                    f"{card.last_review.isoformat()}"
                )
        return now

    def _check_card(self, card: Card) -> Card:
        try:
            state = State(card.state)
        except (ValueError, TypeError):
            raise InvalidCard(f"Card {card.card_id} has unknown state {card.state!r}") from None
        if state is not card.state:
            card = replace(card, state=state)
        if state is State.NEW:
            return card

        if card.stability is None or card.difficulty is None:
            raise InvalidCard(f"Card {card.card_id} is in {state.name} but has no memory state")
        if not card.stability > 0:
            raise InvalidCard(
                f"Card {card.card_id} has non-positive stability {card.stability!r}"
            )
        if not DIFFICULTY_MIN <= card.difficulty <= DIFFICULTY_MAX:
            raise InvalidCard(
                f"Card {card.card_id} has difficulty {card.difficulty!r} outside "
                f"[{DIFFICULTY_MIN:g}, {DIFFICULTY_MAX:g}]"
            )
        return card

    def _rng_for(self, card: Card, now: datetime) -> random.Random:
        if self.seed is None:
            return random.Random()
        return random.Random(f"{self.seed}:{card.card_id}:{card.reps}:{now.isoformat()}")

    def _review(
        self,
        card: Card,
        rating: Rating,
        now: datetime,
        duration: timedelta | None,
        fuzz_factor: float,
    ) -> SchedulingInfo:
        params = self.parameters
        elapsed_days = (now - card.last_review).days if card.last_review else 0
        transition = next_transition(
            card.state, rating, card.step, params.learning_steps, params.relearning_steps
        )

        stability, difficulty, lapses = card.stability, card.difficulty, card.lapses
        recall_days: dict[Rating, int] = {}

        if card.state is State.NEW:
            stability = self.model.initial_stability(rating)
            difficulty = self.model.initial_difficulty(rating)
        elif transition.move is Move.LAPSE:
            r = retrievability(elapsed_days, card.stability)
            stability = self.model.next_stability_on_lapse(card.stability, card.difficulty, r)
            difficulty = self.model.next_difficulty(card.difficulty, rating)
            lapses += 1
        elif transition.move is Move.RECALL:
            r = retrievability(elapsed_days, card.stability)
            recall = {
                g: self.model.next_stability_on_recall(card.stability, card.difficulty, r, g)
                for g in _RECALL_RATINGS
            }
            # Ordering applies to the fuzzed intervals.
            ordered = self.intervals.order(
                *(
                    self.intervals.apply_fuzz(self.intervals.next_interval(recall[g]), fuzz_factor)
                    for g in _RECALL_RATINGS
                )
            )
            recall_days = dict(zip(_RECALL_RATINGS, ordered))
            stability = recall[rating]
            difficulty = self.model.next_difficulty(card.difficulty, rating)

        if transition.is_long_term:
            scheduled_days = self._long_term_days(
                card, rating, transition, stability, recall_days, fuzz_factor
            )
            due = now + timedelta(days=scheduled_days)
        else:
            scheduled_days = transition.delay.days
            due = now + transition.delay

        updated = replace(
            card,
            state=transition.state,
            step=transition.step,
            due=due,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=scheduled_days,
            reps=card.reps + 1,
            lapses=lapses,
            last_review=now,
        )
        log = ReviewLog(
            card_id=card.card_id,
            rating=rating,
            state=card.state,
            review=now,
            scheduled_days=scheduled_days,
            elapsed_days=elapsed_days,
            stability=stability,
            difficulty=difficulty,
            duration=duration,
        )
        return SchedulingInfo(card=updated, review_log=log)

    def _long_term_days(
        self,
        card: Card,
        rating: Rating,
        transition: Transition,
        stability: float,
        recall_days: dict[Rating, int],
        fuzz_factor: float,
    ) -> int:
        if transition.move is Move.RECALL:
            return recall_days[rating]

        base = self.intervals.next_interval(stability)
        days = self.intervals.apply_fuzz(base, fuzz_factor)
        if card.state in (State.LEARNING, State.RELEARNING) and rating is Rating.EASY:
            # Graduating early keeps the memory state, so Easy earns one day over Good.
            maximum = self.parameters.maximum_interval
            easy = self.intervals.apply_fuzz(min(base + 1, maximum), fuzz_factor)
            days = min(max(easy, days + 1), maximum)
        return days
