"""
Domain models for SM-2 scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from cadence.domain.errors import InvalidRatingError, InvalidStateError


class CardStatus(str, Enum):
    """Which transition rule family applies to a card."""

    NEW = "NEW"
    LEARNING = "LEARNING"
    REVIEW = "REVIEW"
    SUSPENDED = "SUSPENDED"

    @classmethod
    def parse(cls, value: "str | CardStatus") -> "CardStatus":
        try:
            return cls(value)
        except ValueError:
            raise InvalidStateError(value) from None


class ReviewRating(str, Enum):
    """
    The learner's answer to a review, ordered by increasing recall quality.

    Each rating maps to the SM-2 quality score used by the easiness update.
    """

    AGAIN = "AGAIN"
    HARD = "HARD"
    GOOD = "GOOD"
    EASY = "EASY"

    @property
    def quality(self) -> int:
        return _QUALITY[self]

    @classmethod
    def parse(cls, value: "str | ReviewRating") -> "ReviewRating":
        if isinstance(value, str) and not isinstance(value, cls):
            value = value.strip().upper()
        try:
            return cls(value)
        except ValueError:
            raise InvalidRatingError(value) from None


_QUALITY = {
    ReviewRating.AGAIN: 0,
    ReviewRating.HARD: 3,
    ReviewRating.GOOD: 4,
    ReviewRating.EASY: 5,
}


@dataclass(frozen=True)
class CardLearningState:
    """
    Learning state of one card for one learner.

    Attributes:
        state: Current status; selects the transition rule.
        due_date: Moment at/after which the card can be reviewed.
        interval: Days until the next review. Zero while NEW or LEARNING.
        repetitions: Learning-step index while LEARNING, consecutive
            successful reviews while REVIEW.
        easiness_factor: Interval growth multiplier, never below 1.3.
        lapses: Times the card was forgotten.
        last_reviewed: Informational; not read by the transition.
        card_id: Optional identity, carried through transitions.
        user_id: Optional identity, carried through transitions.
    """

    state: CardStatus
    due_date: datetime
    interval: int = 0
    repetitions: int = 0
    easiness_factor: float = 2.5
    lapses: int = 0
    last_reviewed: datetime | None = None
    card_id: str | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class ReviewResult:
    """Before/after view of a single transition."""

    rating: ReviewRating
    previous: CardLearningState
    next: CardLearningState

    @property
    def previous_interval(self) -> int:
        return self.previous.interval

    @property
    def new_interval(self) -> int:
        return self.next.interval

    @property
    def new_due_date(self) -> datetime:
        return self.next.due_date


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single review history record, written once per submitted review.

    Attributes:
        card_id: The card that was reviewed.
        user_id: The learner who reviewed it.
        rating: Button pressed.
        response_time_ms: Time taken to answer.
        reviewed_at: When the review was submitted.
        previous_interval: Interval before the review (days).
        new_interval: Interval assigned by the review (days).
        easiness_factor: Easiness factor after the review.
    """

    card_id: str
    user_id: str
    rating: ReviewRating
    response_time_ms: int
    reviewed_at: datetime
    previous_interval: int
    new_interval: int
    easiness_factor: float


@dataclass
class DueCounts:
    """Number of due, non-suspended cards per status."""

    new: int = 0
    learning: int = 0
    review: int = 0

    @property
    def total(self) -> int:
        return self.new + self.learning + self.review


@dataclass
class QueueEntry:
    """A due card in a study queue, with display hints.

    Queue entries are only built for due cards, so is_overdue is always True.
    """

    state: CardLearningState
    is_overdue: bool
    description: str


@dataclass
class ReviewOutcome:
    """Result of submitting a review through the study service."""

    result: ReviewResult
    log_entry: ReviewLogEntry
