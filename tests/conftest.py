import os
from datetime import datetime, timezone

import pytest

from cadence.application.scheduler import SuperMemo2Scheduler, default_scheduler
from cadence.domain.scheduling.models import CardLearningState, CardStatus


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files and CADENCE_* variables out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for key in list(os.environ):
        if key.startswith("CADENCE_"):
            monkeypatch.delenv(key)

    default_scheduler.cache_clear()
    yield home
    default_scheduler.cache_clear()


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def scheduler():
    return SuperMemo2Scheduler()


@pytest.fixture
def make_state(now):
    """Factory for card states with sensible defaults."""

    def _make(**overrides) -> CardLearningState:
        fields = dict(
            state=CardStatus.NEW,
            due_date=now,
            interval=0,
            repetitions=0,
            easiness_factor=2.5,
            lapses=0,
            last_reviewed=None,
            card_id="card-1",
            user_id="user-1",
        )
        fields.update(overrides)
        return CardLearningState(**fields)

    return _make
