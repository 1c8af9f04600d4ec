import pytest

from cadence.domain.scheduling.models import CardStatus
from cadence.infrastructure.adapters.memory_repository import InMemoryCardStateRepository


@pytest.mark.asyncio
async def test_save_and_get(make_state):
    repo = InMemoryCardStateRepository()
    state = make_state()

    await repo.save_state(state)

    assert await repo.get_state("card-1", "user-1") == state
    assert await repo.get_state("card-1", "someone-else") is None


@pytest.mark.asyncio
async def test_save_replaces_existing(make_state):
    repo = InMemoryCardStateRepository([make_state()])

    await repo.save_state(make_state(state=CardStatus.REVIEW, interval=6))

    stored = await repo.get_state("card-1", "user-1")
    assert stored.interval == 6


@pytest.mark.asyncio
async def test_list_states_filters_by_user(make_state):
    repo = InMemoryCardStateRepository(
        [
            make_state(card_id="a"),
            make_state(card_id="b"),
            make_state(card_id="c", user_id="user-2"),
        ]
    )

    states = await repo.list_states("user-1")
    assert sorted(s.card_id for s in states) == ["a", "b"]


@pytest.mark.asyncio
async def test_save_requires_identity(make_state):
    repo = InMemoryCardStateRepository()
    with pytest.raises(ValueError):
        await repo.save_state(make_state(card_id=None))
