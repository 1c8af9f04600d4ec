"""Invariants checked over seeded random review histories."""

import random
from datetime import timedelta

import pytest

from cadence.domain.scheduling.models import CardStatus, ReviewRating

SEEDS = range(30)
STEPS = 60
# Restart histories before due dates run past datetime.max
MAX_INTERVAL = 3650


def _random_history(scheduler, now, seed):
    """Yield (rating, before, now, after) for a random sequence of reviews."""
    rng = random.Random(seed)
    start = now
    state = scheduler.schedule_new_card(start)

    for _ in range(STEPS):
        if state.interval > MAX_INTERVAL:
            state = scheduler.schedule_new_card(start)
        rating = rng.choice(list(ReviewRating))
        # Review on time, early or late
        now = state.due_date + timedelta(minutes=rng.randint(-600, 60 * 24 * 30))
        after = scheduler.calculate_next_review(rating, state, now)
        yield rating, state, now, after
        state = after


@pytest.mark.parametrize("seed", SEEDS)
def test_easiness_factor_never_below_floor(scheduler, now, seed):
    for _, _, _, after in _random_history(scheduler, now, seed):
        assert after.easiness_factor >= 1.3


@pytest.mark.parametrize("seed", SEEDS)
def test_interval_bounds(scheduler, now, seed):
    for _, _, _, after in _random_history(scheduler, now, seed):
        assert after.interval >= 0
        assert after.repetitions >= 0
        if after.state in (CardStatus.NEW, CardStatus.LEARNING):
            assert after.interval == 0
        else:
            assert after.interval >= 1


@pytest.mark.parametrize("seed", SEEDS)
def test_never_scheduled_into_the_past(scheduler, now, seed):
    for _, _, when, after in _random_history(scheduler, now, seed):
        assert after.due_date >= when


@pytest.mark.parametrize("seed", SEEDS)
def test_transition_is_deterministic(scheduler, now, seed):
    for rating, before, when, after in _random_history(scheduler, now, seed):
        assert scheduler.calculate_next_review(rating, before, when) == after


@pytest.mark.parametrize("seed", SEEDS)
def test_lapses_only_grow_on_again(scheduler, now, seed):
    for rating, before, _, after in _random_history(scheduler, now, seed):
        if rating == ReviewRating.AGAIN and before.state != CardStatus.NEW:
            assert after.lapses == before.lapses + 1
        else:
            assert after.lapses == before.lapses


@pytest.mark.parametrize("seed", SEEDS)
def test_input_state_is_not_mutated(scheduler, now, seed):
    for rating, before, when, _ in _random_history(scheduler, now, seed):
        snapshot = (before.state, before.interval, before.repetitions, before.easiness_factor)
        scheduler.calculate_next_review(rating, before, when)
        assert snapshot == (
            before.state,
            before.interval,
            before.repetitions,
            before.easiness_factor,
        )
