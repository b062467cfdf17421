from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from buzzr_bot.errors import StorageError
from buzzr_bot.models import create_engine, create_session_factory
from buzzr_bot.store import SubscriberStore


@pytest.mark.asyncio
async def test_upsert_is_idempotent(store: SubscriberStore) -> None:
    await store.upsert_subscriber("u1", "g1", "+12345678900")
    await store.upsert_subscriber("u1", "g1", "+12345678900")

    subscribers = await store.list_subscribers("g1")
    assert [(s.user_id, s.phone_number) for s in subscribers] == [("u1", "+12345678900")]
    assert await store.count_subscribers("g1") == 1


@pytest.mark.asyncio
async def test_upsert_replaces_number(store: SubscriberStore) -> None:
    await store.upsert_subscriber("u1", "g1", "+12345678900")
    await store.upsert_subscriber("u1", "g1", "+19998887777")

    subscribers = await store.list_subscribers("g1")
    assert len(subscribers) == 1
    assert subscribers[0].phone_number == "+19998887777"


@pytest.mark.asyncio
async def test_subscriptions_are_per_guild(store: SubscriberStore) -> None:
    await store.upsert_subscriber("u1", "g1", "+12345678900")
    await store.upsert_subscriber("u1", "g2", "+12345678900")
    await store.upsert_subscriber("u2", "g1", "+13334445555")

    assert await store.count_subscribers("g1") == 2
    assert await store.count_subscribers("g2") == 1
    assert await store.list_subscribers("g3") == []


@pytest.mark.asyncio
async def test_remove_subscriber_reports_whether_anything_was_deleted(store: SubscriberStore) -> None:
    await store.upsert_subscriber("u1", "g1", "+12345678900")

    assert await store.remove_subscriber("u1", "g1") is True
    assert await store.remove_subscriber("u1", "g1") is False
    assert await store.list_subscribers("g1") == []


@pytest.mark.asyncio
async def test_remove_subscriber_by_user(store: SubscriberStore) -> None:
    await store.upsert_subscriber("u1", "g1", "+12345678900")
    await store.upsert_subscriber("u1", "g2", "+12345678900")
    await store.upsert_subscriber("u1", "g3", "+12345678900")

    assert await store.remove_subscriber_by_user("u1", "g1") == 1
    assert await store.count_subscribers("g2") == 1
    assert await store.remove_subscriber_by_user("u1") == 2
    assert await store.count_subscribers("g3") == 0


@pytest.mark.asyncio
async def test_announcement_channel_unset_then_replaced(store: SubscriberStore) -> None:
    assert await store.get_announcement_channel("g1") is None

    await store.set_announcement_channel("g1", "c1", "admin1")
    assert await store.get_announcement_channel("g1") == "c1"

    record = await store.set_announcement_channel("g1", "c2", "admin2")
    assert record.set_by == "admin2"
    assert await store.get_announcement_channel("g1") == "c2"
    assert await store.get_announcement_channel("g2") is None


@pytest.mark.asyncio
async def test_io_failures_become_storage_errors(tmp_path: Path) -> None:
    # Parent directory does not exist, so SQLite cannot open the file.
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'buzzr.db'}")
    broken = SubscriberStore(create_session_factory(engine))
    try:
        with pytest.raises(StorageError):
            await broken.upsert_subscriber("u1", "g1", "+12345678900")
        with pytest.raises(StorageError):
            await broken.list_subscribers("g1")
        with pytest.raises(StorageError):
            await broken.get_announcement_channel("g1")
        # Member-departure cleanup only logs.
        assert await broken.remove_subscriber_by_user("u1", "g1") == 0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_signups_for_same_key_both_succeed(store: SubscriberStore) -> None:
    first, second = await asyncio.gather(
        store.upsert_subscriber("u1", "g1", "+12345678900"),
        store.upsert_subscriber("u1", "g1", "+19998887777"),
    )

    assert first.user_id == second.user_id == "u1"
    subscribers = await store.list_subscribers("g1")
    assert len(subscribers) == 1
    assert subscribers[0].phone_number in {"+12345678900", "+19998887777"}


@pytest.mark.asyncio
async def test_reregistering_keeps_signup_time(store: SubscriberStore) -> None:
    original = await store.upsert_subscriber("u1", "g1", "+12345678900")
    updated = await store.upsert_subscriber("u1", "g1", "+19998887777")

    assert updated.phone_number == "+19998887777"
    assert updated.created_at == original.created_at
