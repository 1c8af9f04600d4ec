"""
In-memory CardStateRepository.

Keeps states in a dict keyed by (card_id, user_id). Useful for tests and
for callers that persist elsewhere.
"""

import asyncio
import logging

from cadence.domain.scheduling.models import CardLearningState, ReviewLogEntry
from cadence.domain.scheduling.ports import CardStateRepository

logger = logging.getLogger(__name__)


class InMemoryCardStateRepository(CardStateRepository):
    """Dict-backed repository. Mutations are serialised with an asyncio.Lock."""

    def __init__(self, states: list[CardLearningState] | None = None):
        self._states: dict[tuple[str, str], CardLearningState] = {}
        self._reviews: list[ReviewLogEntry] = []
        self._lock = asyncio.Lock()
        for state in states or []:
            self._states[self._key(state)] = state

    @staticmethod
    def _key(state: CardLearningState) -> tuple[str, str]:
        if state.card_id is None or state.user_id is None:
            raise ValueError("card_id and user_id are required to store a card state")
        return (state.card_id, state.user_id)

    @property
    def reviews(self) -> list[ReviewLogEntry]:
        return list(self._reviews)

    async def get_state(self, card_id: str, user_id: str) -> CardLearningState | None:
        return self._states.get((card_id, user_id))

    async def save_state(self, state: CardLearningState) -> None:
        key = self._key(state)
        async with self._lock:
            self._states[key] = state
        logger.debug(f"Saved state for card={key[0]} user={key[1]}: {state.state}")

    async def list_states(self, user_id: str) -> list[CardLearningState]:
        return [s for (_, uid), s in self._states.items() if uid == user_id]

    async def add_review(self, entry: ReviewLogEntry) -> None:
        async with self._lock:
            self._reviews.append(entry)
