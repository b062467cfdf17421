from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio

from buzzr_bot.errors import ExternalDeliveryError
from buzzr_bot.models import create_engine, create_session_factory, init_schema
from buzzr_bot.sessions import SessionRegistry
from buzzr_bot.sms import SmsSender
from buzzr_bot.store import SubscriberStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway:
    """Records every send; numbers in ``failing`` raise like a carrier rejection."""

    def __init__(self, failing: Optional[set[str]] = None) -> None:
        self.failing = failing or set()
        self.sent: list[dict[str, str]] = []

    async def send(self, from_number: str, to_number: str, body: str) -> None:
        if to_number in self.failing:
            raise ExternalDeliveryError(to_number, "carrier rejected")
        self.sent.append({"from": from_number, "to": to_number, "body": body})


class FakeDirectory:
    def __init__(self) -> None:
        self.guilds: dict[str, str] = {}
        self.members: dict[str, set[str]] = {}

    def add_guild(self, guild_id: str, name: str, *members: str) -> None:
        self.guilds[guild_id] = name
        self.members[guild_id] = set(members)

    def guild_name(self, guild_id: str) -> Optional[str]:
        return self.guilds.get(guild_id)

    def is_member(self, guild_id: str, user_id: str) -> bool:
        return user_id in self.members.get(guild_id, set())


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'buzzr.db'}")
    await init_schema(engine)
    yield SubscriberStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> SessionRegistry:
    return SessionRegistry(timeout=15 * 60, sweep_interval=5 * 60, clock=clock)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def sender(gateway: FakeGateway) -> SmsSender:
    return SmsSender(gateway, " +1 (555) 000-1111 ")


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()
