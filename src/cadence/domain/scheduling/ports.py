"""
Ports (interfaces) for card-state persistence.

These define the contract that infrastructure adapters must implement.
The study service depends on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import CardLearningState, ReviewLogEntry


class CardStateRepository(ABC):
    """
    Port for loading and storing per-learner card states.

    Implementations:
        - InMemoryCardStateRepository: dict-backed, for tests and embedding.
    """

    @abstractmethod
    async def get_state(self, card_id: str, user_id: str) -> CardLearningState | None:
        """
        Fetch the learning state for a (card, user) pair.

        Returns:
            The stored state, or None if the pair has none.
        """
        pass

    @abstractmethod
    async def save_state(self, state: CardLearningState) -> None:
        """
        Store a state over any previous one with the same card_id and user_id.
        """
        pass

    @abstractmethod
    async def list_states(self, user_id: str) -> list[CardLearningState]:
        """
        Fetch every stored state belonging to a user.
        """
        pass

    @abstractmethod
    async def add_review(self, entry: ReviewLogEntry) -> None:
        """
        Append a review history record.
        """
        pass
