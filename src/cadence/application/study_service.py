"""
Study Service: application layer orchestrator.

Coordinates loading card states from the repository, running them through
the scheduler, and persisting the results along with review history.
"""

import logging
from dataclasses import replace
from datetime import datetime

from cadence.application.scheduler import SuperMemo2Scheduler, utcnow
from cadence.domain.constants import DEFAULT_QUEUE_LIMIT, MAX_QUEUE_LIMIT
from cadence.domain.errors import CardStateNotFoundError
from cadence.domain.scheduling.models import (
    CardLearningState,
    CardStatus,
    DueCounts,
    QueueEntry,
    ReviewLogEntry,
    ReviewOutcome,
    ReviewRating,
)
from cadence.domain.scheduling.ports import CardStateRepository

logger = logging.getLogger(__name__)

# NEW first, then LEARNING, then REVIEW
_QUEUE_ORDER = {
    CardStatus.NEW: 0,
    CardStatus.LEARNING: 1,
    CardStatus.REVIEW: 2,
}


class StudyService:
    """
    Application service for study sessions.

    Follows Dependency Inversion: depends on the CardStateRepository
    abstraction, not a concrete storage adapter.
    """

    def __init__(
        self,
        repo: CardStateRepository,
        scheduler: SuperMemo2Scheduler | None = None,
    ):
        """
        Args:
            repo: The repository (port) for card states and review history.
            scheduler: Optional custom scheduler; uses default config if not provided.
        """
        self._repo = repo
        self._scheduler = scheduler or SuperMemo2Scheduler()

    async def create_card_state(
        self, card_id: str, user_id: str, now: datetime | None = None
    ) -> CardLearningState:
        """
        Create and store the initial state for a newly added card.
        """
        state = self._scheduler.schedule_new_card(now, card_id=card_id, user_id=user_id)
        await self._repo.save_state(state)
        return state

    async def submit_review(
        self,
        card_id: str,
        user_id: str,
        rating: ReviewRating | str,
        response_time_ms: int,
        now: datetime | None = None,
    ) -> ReviewOutcome:
        """
        Apply a review to a card, store its new state and log the review.

        Args:
            card_id: The reviewed card.
            user_id: The learner.
            rating: The learner's answer.
            response_time_ms: Time taken to answer, in milliseconds.
            now: Reference time. Defaults to the wall clock.

        Returns:
            ReviewOutcome with the before/after states and the log entry.

        Raises:
            CardStateNotFoundError: The pair has no stored state.
            ValueError: response_time_ms is negative.
        """
        if response_time_ms < 0:
            raise ValueError("response_time_ms must be non-negative")

        rating = ReviewRating.parse(rating)
        now = now or utcnow()
        current = await self._require_state(card_id, user_id)

        result = self._scheduler.review(rating, current, now)
        await self._repo.save_state(result.next)

        entry = ReviewLogEntry(
            card_id=card_id,
            user_id=user_id,
            rating=rating,
            response_time_ms=response_time_ms,
            reviewed_at=now,
            previous_interval=result.previous_interval,
            new_interval=result.new_interval,
            easiness_factor=result.next.easiness_factor,
        )
        await self._repo.add_review(entry)

        logger.info(
            f"Review card={card_id} user={user_id} rating={rating.value}: "
            f"{current.state.value} -> {result.next.state.value}, "
            f"interval {result.previous_interval} -> {result.new_interval}"
        )
        return ReviewOutcome(result=result, log_entry=entry)

    async def get_review_queue(
        self,
        user_id: str,
        now: datetime | None = None,
        limit: int = DEFAULT_QUEUE_LIMIT,
        include_new: bool = True,
        include_learning: bool = True,
        include_review: bool = True,
    ) -> list[QueueEntry]:
        """
        Build the study queue: due, non-suspended cards.

        Ordered by status (NEW, LEARNING, REVIEW), then by due date. With
        every include_* flag off, no status filter is applied. Entries are
        always due, so is_overdue is True for each of them.
        """
        if not 1 <= limit <= MAX_QUEUE_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_QUEUE_LIMIT}")

        now = now or utcnow()
        wanted = set()
        if include_new:
            wanted.add(CardStatus.NEW)
        if include_learning:
            wanted.add(CardStatus.LEARNING)
        if include_review:
            wanted.add(CardStatus.REVIEW)

        due = await self._due_states(user_id, now)
        if wanted:
            due = [s for s in due if s.state in wanted]
        due.sort(key=lambda s: (_QUEUE_ORDER[s.state], s.due_date))

        return [
            QueueEntry(
                state=s,
                is_overdue=self._scheduler.is_due(s, now),
                description=self._scheduler.describe(s, now),
            )
            for s in due[:limit]
        ]

    async def get_due_counts(self, user_id: str, now: datetime | None = None) -> DueCounts:
        """
        Count due, non-suspended cards per status.
        """
        counts = DueCounts()
        for s in await self._due_states(user_id, now or utcnow()):
            if s.state == CardStatus.NEW:
                counts.new += 1
            elif s.state == CardStatus.LEARNING:
                counts.learning += 1
            else:
                counts.review += 1
        return counts

    async def suspend_card(self, card_id: str, user_id: str) -> CardLearningState:
        """
        Exclude a card from study. Scheduling fields are left as they are.
        """
        current = await self._require_state(card_id, user_id)
        suspended = replace(current, state=CardStatus.SUSPENDED)
        await self._repo.save_state(suspended)
        logger.info(f"Suspended card={card_id} user={user_id}")
        return suspended

    async def unsuspend_card(
        self, card_id: str, user_id: str, now: datetime | None = None
    ) -> CardLearningState:
        """
        Return a suspended card to NEW, due immediately.

        Raises:
            CardStateNotFoundError: The pair has no state, or is not suspended.
        """
        current = await self._require_state(card_id, user_id)
        if current.state != CardStatus.SUSPENDED:
            raise CardStateNotFoundError(card_id, user_id, "Suspended card state not found")

        restored = replace(current, state=CardStatus.NEW, due_date=now or utcnow())
        await self._repo.save_state(restored)
        logger.info(f"Unsuspended card={card_id} user={user_id}")
        return restored

    async def _require_state(self, card_id: str, user_id: str) -> CardLearningState:
        state = await self._repo.get_state(card_id, user_id)
        if state is None:
            logger.warning(f"No card state for card={card_id} user={user_id}")
            raise CardStateNotFoundError(card_id, user_id)
        return state

    async def _due_states(self, user_id: str, now: datetime) -> list[CardLearningState]:
        states = await self._repo.list_states(user_id)
        return [
            s
            for s in states
            if s.state != CardStatus.SUSPENDED and self._scheduler.is_due(s, now)
        ]
