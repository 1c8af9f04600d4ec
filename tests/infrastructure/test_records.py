from datetime import datetime, timezone

import pytest

from cadence.domain.errors import InvalidStateError
from cadence.domain.scheduling.models import CardStatus
from cadence.infrastructure.adapters.records import card_state_from_record, card_state_to_record


def _row(**overrides):
    row = {
        "id": "1",
        "card_id": "card-1",
        "user_id": "user-1",
        "state": "REVIEW",
        "due_date": datetime(2023, 12, 1, tzinfo=timezone.utc),
        "interval": 10,
        "repetitions": 3,
        "easiness_factor": 2.5,
        "lapses": 1,
        "last_reviewed": datetime(2023, 11, 21, tzinfo=timezone.utc),
        "created_at": datetime(2023, 10, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


def test_from_record():
    state = card_state_from_record(_row())

    assert state.state == CardStatus.REVIEW
    assert state.due_date == datetime(2023, 12, 1, tzinfo=timezone.utc)
    assert state.interval == 10
    assert state.repetitions == 3
    assert state.easiness_factor == 2.5
    assert state.lapses == 1
    assert state.last_reviewed == datetime(2023, 11, 21, tzinfo=timezone.utc)
    assert (state.card_id, state.user_id) == ("card-1", "user-1")


def test_from_record_null_last_reviewed():
    assert card_state_from_record(_row(state="NEW", last_reviewed=None)).last_reviewed is None


def test_from_record_parses_iso_strings():
    state = card_state_from_record(_row(due_date="2023-12-01T08:30:00+00:00"))
    assert state.due_date == datetime(2023, 12, 1, 8, 30, tzinfo=timezone.utc)


def test_from_record_applies_column_defaults():
    state = card_state_from_record({"state": "NEW", "due_date": "2024-01-01T00:00:00+00:00"})

    assert state.interval == 0
    assert state.repetitions == 0
    assert state.easiness_factor == 2.5
    assert state.lapses == 0


def test_from_record_rejects_unknown_state():
    with pytest.raises(InvalidStateError):
        card_state_from_record(_row(state="ARCHIVED"))


def test_from_record_rejects_bad_timestamp_type():
    with pytest.raises(TypeError):
        card_state_from_record(_row(due_date=12345))


def test_to_record_round_trips():
    state = card_state_from_record(_row())
    assert card_state_from_record(card_state_to_record(state)) == state


def test_to_record_is_json_friendly(make_state):
    record = card_state_to_record(make_state())

    assert record["state"] == "NEW"
    assert isinstance(record["due_date"], str)
    assert record["last_reviewed"] is None
