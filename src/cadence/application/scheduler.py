"""
SuperMemo-2 scheduler with learning and relearning steps.

This is a pure computation module with no I/O. Every transition is a
function of (rating, current state, now) and returns a new state.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from cadence.application.config import SchedulerConfig, resolve_config
from cadence.domain.errors import InvalidStateError
from cadence.domain.scheduling.models import (
    CardLearningState,
    CardStatus,
    ReviewRating,
    ReviewResult,
)

SECONDS_PER_DAY = 86400


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


class SuperMemo2Scheduler:
    """
    Computes the next learning state of a card after a review.

    Stateless apart from its frozen config, so one instance can be shared
    across threads and requests.
    """

    def __init__(self, config: SchedulerConfig | None = None):
        self.config = config or SchedulerConfig()
        self._transitions = {
            CardStatus.NEW: self._from_new,
            CardStatus.LEARNING: self._from_learning,
            CardStatus.REVIEW: self._from_review,
            CardStatus.SUSPENDED: self._from_suspended,
        }

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def schedule_new_card(
        self,
        now: datetime | None = None,
        card_id: str | None = None,
        user_id: str | None = None,
    ) -> CardLearningState:
        """Create the initial state for a (card, learner) pair, due immediately."""
        return CardLearningState(
            state=CardStatus.NEW,
            due_date=now if now is not None else utcnow(),
            interval=0,
            repetitions=0,
            easiness_factor=self.config.initial_easiness_factor,
            lapses=0,
            last_reviewed=None,
            card_id=card_id,
            user_id=user_id,
        )

    def calculate_next_review(
        self,
        rating: ReviewRating,
        current: CardLearningState,
        now: datetime | None = None,
    ) -> CardLearningState:
        """
        Apply a rating to a card and return its next state.

        Args:
            rating: The learner's answer.
            current: The card's state before the review.
            now: Reference time. Defaults to the wall clock.

        Raises:
            InvalidStateError: current.state is not a known CardStatus.
        """
        try:
            transition = self._transitions[current.state]
        except (KeyError, TypeError):
            raise InvalidStateError(current.state) from None

        return transition(ReviewRating.parse(rating), current, now or utcnow())

    def review(
        self,
        rating: ReviewRating,
        current: CardLearningState,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Like calculate_next_review, but keeps the previous state alongside."""
        rating = ReviewRating.parse(rating)
        return ReviewResult(
            rating=rating,
            previous=current,
            next=self.calculate_next_review(rating, current, now),
        )

    def preview(
        self, current: CardLearningState, now: datetime | None = None
    ) -> dict[ReviewRating, CardLearningState]:
        """Outcome of every possible rating, for answer-button hints."""
        now = now or utcnow()
        return {
            rating: self.calculate_next_review(rating, current, now) for rating in ReviewRating
        }

    def adjust_easiness_factor(self, current_ef: float, rating: ReviewRating) -> float:
        """
        Classic SM-2 easiness update, clamped from below only.

        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        """
        q = ReviewRating.parse(rating).quality
        new_ef = current_ef + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        return max(new_ef, self.config.min_easiness_factor)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_due(self, state: CardLearningState, now: datetime | None = None) -> bool:
        return state.due_date <= (now or utcnow())

    def days_until_due(self, state: CardLearningState, now: datetime | None = None) -> int:
        """Whole days until due, rounded up. Zero or negative once due."""
        remaining = (state.due_date - (now or utcnow())).total_seconds()
        return math.ceil(remaining / SECONDS_PER_DAY)

    def describe(self, state: CardLearningState, now: datetime | None = None) -> str:
        now = now or utcnow()

        if state.state == CardStatus.NEW:
            return "New"
        if state.state == CardStatus.LEARNING:
            minutes = math.ceil((state.due_date - now).total_seconds() / 60)
            return f"Learning ({minutes}m)"
        if state.state == CardStatus.REVIEW:
            days = self.days_until_due(state, now)
            if days <= 0:
                return "Due"
            if days == 1:
                return "Due tomorrow"
            return f"Due in {days} days"
        if state.state == CardStatus.SUSPENDED:
            return "Suspended"
        raise InvalidStateError(state.state)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _from_new(
        self, rating: ReviewRating, current: CardLearningState, now: datetime
    ) -> CardLearningState:
        if rating == ReviewRating.AGAIN:
            return self._learning(
                current,
                now,
                repetitions=0,
                lapses=current.lapses,
                easiness_factor=current.easiness_factor,
                delay_minutes=self.config.learning_steps[0],
            )
        return self._graduate(rating, current, now)

    def _from_learning(
        self, rating: ReviewRating, current: CardLearningState, now: datetime
    ) -> CardLearningState:
        steps = self.config.learning_steps

        if rating == ReviewRating.AGAIN:
            return self._learning(
                current,
                now,
                repetitions=0,
                lapses=current.lapses + 1,
                easiness_factor=current.easiness_factor,
                delay_minutes=steps[0],
            )

        step_index = min(current.repetitions, len(steps) - 1)
        if step_index >= len(steps) - 1:
            return self._graduate(rating, current, now)

        return self._learning(
            current,
            now,
            repetitions=current.repetitions + 1,
            lapses=current.lapses,
            easiness_factor=current.easiness_factor,
            delay_minutes=steps[step_index + 1],
        )

    def _from_review(
        self, rating: ReviewRating, current: CardLearningState, now: datetime
    ) -> CardLearningState:
        cfg = self.config

        if rating == ReviewRating.AGAIN:
            return self._learning(
                current,
                now,
                repetitions=0,
                lapses=current.lapses + 1,
                easiness_factor=max(
                    current.easiness_factor - cfg.lapse_easiness_penalty,
                    cfg.min_easiness_factor,
                ),
                delay_minutes=cfg.relearning_steps[0],
            )

        new_ef = self.adjust_easiness_factor(current.easiness_factor, rating)

        if current.repetitions == 0:
            interval = cfg.graduating_interval
        elif current.repetitions == 1:
            interval = cfg.second_review_interval
        else:
            interval = round_half_up(current.interval * new_ef)

        if rating == ReviewRating.HARD:
            interval = max(1, round_half_up(interval * cfg.hard_interval_multiplier))
        elif rating == ReviewRating.EASY:
            interval = round_half_up(interval * cfg.easy_interval_multiplier)

        return self._review(
            current,
            now,
            interval=interval,
            repetitions=current.repetitions + 1,
            easiness_factor=new_ef,
        )

    def _from_suspended(
        self, rating: ReviewRating, current: CardLearningState, now: datetime
    ) -> CardLearningState:
        # Reviewing a suspended card unsuspends it as if it were new
        return self._from_new(rating, current, now)

    def _graduate(
        self, rating: ReviewRating, current: CardLearningState, now: datetime
    ) -> CardLearningState:
        # HARD graduates like GOOD; only EASY gets the longer first interval
        if rating == ReviewRating.EASY:
            interval = self.config.easy_graduating_interval
        else:
            interval = self.config.graduating_interval

        return self._review(
            current,
            now,
            interval=interval,
            repetitions=1,
            easiness_factor=self.adjust_easiness_factor(current.easiness_factor, rating),
        )

    def _learning(
        self,
        current: CardLearningState,
        now: datetime,
        *,
        repetitions: int,
        lapses: int,
        easiness_factor: float,
        delay_minutes: int,
    ) -> CardLearningState:
        return replace(
            current,
            state=CardStatus.LEARNING,
            interval=0,
            repetitions=repetitions,
            easiness_factor=easiness_factor,
            lapses=lapses,
            due_date=now + timedelta(minutes=delay_minutes),
            last_reviewed=now,
        )

    def _review(
        self,
        current: CardLearningState,
        now: datetime,
        *,
        interval: int,
        repetitions: int,
        easiness_factor: float,
    ) -> CardLearningState:
        return replace(
            current,
            state=CardStatus.REVIEW,
            interval=interval,
            repetitions=repetitions,
            easiness_factor=easiness_factor,
            due_date=now + timedelta(days=interval),
            last_reviewed=now,
        )


# ---------------------------------------------------------------------------
# Module-level API bound to the resolved configuration
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def default_scheduler() -> SuperMemo2Scheduler:
    return SuperMemo2Scheduler(resolve_config())


def schedule_new_card(
    now: datetime | None = None, card_id: str | None = None, user_id: str | None = None
) -> CardLearningState:
    return default_scheduler().schedule_new_card(now, card_id=card_id, user_id=user_id)


def calculate_next_review(
    rating: ReviewRating, current: CardLearningState, now: datetime | None = None
) -> CardLearningState:
    return default_scheduler().calculate_next_review(rating, current, now)


def is_due(state: CardLearningState, now: datetime | None = None) -> bool:
    return default_scheduler().is_due(state, now)


def days_until_due(state: CardLearningState, now: datetime | None = None) -> int:
    return default_scheduler().days_until_due(state, now)


def describe(state: CardLearningState, now: datetime | None = None) -> str:
    return default_scheduler().describe(state, now)
