# Domain Scheduling Package
from .models import (
    CardLearningState,
    CardStatus,
    DueCounts,
    QueueEntry,
    ReviewLogEntry,
    ReviewOutcome,
    ReviewRating,
    ReviewResult,
)
from .ports import CardStateRepository

__all__ = [
    "CardStatus",
    "ReviewRating",
    "CardLearningState",
    "ReviewResult",
    "ReviewLogEntry",
    "ReviewOutcome",
    "DueCounts",
    "QueueEntry",
    "CardStateRepository",
]
