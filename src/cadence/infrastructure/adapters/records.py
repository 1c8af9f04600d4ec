"""
Conversion between stored card-state rows and CardLearningState.

Rows use the snake_case column names of the card_state table:
state, due_date, interval, repetitions, easiness_factor, lapses,
last_reviewed, card_id, user_id.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from cadence.domain.constants import INITIAL_EASINESS_FACTOR
from cadence.domain.scheduling.models import CardLearningState, CardStatus


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Expected datetime or ISO-8601 string, got {type(value).__name__}")


def card_state_from_record(record: Mapping[str, Any]) -> CardLearningState:
    """
    Build a CardLearningState from a stored row.

    Raises:
        InvalidStateError: The row's state is not a known CardStatus.
        KeyError: A required column (state, due_date) is missing.
    """
    return CardLearningState(
        state=CardStatus.parse(record["state"]),
        due_date=_parse_timestamp(record["due_date"]),
        interval=int(record.get("interval", 0)),
        repetitions=int(record.get("repetitions", 0)),
        easiness_factor=float(record.get("easiness_factor", INITIAL_EASINESS_FACTOR)),
        lapses=int(record.get("lapses", 0)),
        last_reviewed=_parse_timestamp(record.get("last_reviewed")),
        card_id=record.get("card_id"),
        user_id=record.get("user_id"),
    )


def card_state_to_record(state: CardLearningState) -> dict[str, Any]:
    """Flatten a CardLearningState into a JSON-friendly row."""
    return {
        "card_id": state.card_id,
        "user_id": state.user_id,
        "state": CardStatus.parse(state.state).value,
        "due_date": state.due_date.isoformat(),
        "interval": state.interval,
        "repetitions": state.repetitions,
        "easiness_factor": state.easiness_factor,
        "lapses": state.lapses,
        "last_reviewed": state.last_reviewed.isoformat() if state.last_reviewed else None,
    }
