"""SQLAlchemy ORM models for Buzzr's persistent state."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, String, func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine.
    """

    return create_async_engine(database_url, future=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Build an async session factory bound to the engine.
    """

    return async_sessionmaker(engine, expire_on_commit=False)


async def init_schema(engine: AsyncEngine) -> None:
    """Create missing tables. There is no migration step; the schema is fixed."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class Subscriber(Base):
    """A member of one guild who receives that guild's announcements by SMS."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    guild_id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    # Always canonical (+1XXXXXXXXXX), never raw input.
    phone_number: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=func.now())


class AnnouncementChannel(Base):
    """The single channel per guild whose messages are relayed over SMS."""

    __tablename__ = "announcement_channels"

    guild_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    channel_id: Mapped[str] = mapped_column(String(64))
    set_by: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), onupdate=func.now()
    )
