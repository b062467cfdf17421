"""
Helpers for loading and persisting subscribers and announcement channels.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import StorageError
from .models import AnnouncementChannel, Subscriber

logger = logging.getLogger(__name__)


class SubscriberStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def upsert_subscriber(self, user_id: str, guild_id: str, phone_number: str) -> Subscriber:
        """
        Register (or re-register) a phone number for one user in one guild.

        A single INSERT ... ON CONFLICT statement, so two signups racing on the
        same key both succeed and the last write wins. The first
        ``created_at`` is kept on re-registration.
        """
        stmt = sqlite_insert(Subscriber).values(user_id=user_id, guild_id=guild_id, phone_number=phone_number)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "guild_id"],
            set_={"phone_number": stmt.excluded.phone_number},
        )
        try:
            async with self.session() as session:
                await session.execute(stmt)
                await session.commit()
                return await session.get(Subscriber, (user_id, guild_id))
        except SQLAlchemyError as exc:
            raise StorageError(f"could not save subscriber {user_id} for guild {guild_id}") from exc

    async def remove_subscriber(self, user_id: str, guild_id: str) -> bool:
        """Delete one subscription. Returns False when there was nothing to delete."""
        try:
            async with self.session() as session:
                result = await session.execute(
                    delete(Subscriber).where(Subscriber.user_id == user_id, Subscriber.guild_id == guild_id)
                )
                await session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise StorageError(f"could not remove subscriber {user_id} from guild {guild_id}") from exc

    async def remove_subscriber_by_user(self, user_id: str, guild_id: Optional[str] = None) -> int:
        """
        Best-effort cleanup when a member leaves.

        Scoped to one guild when ``guild_id`` is given, otherwise removes the user
        from every guild. Failures are logged and reported as zero rows.
        """
        stmt = delete(Subscriber).where(Subscriber.user_id == user_id)
        if guild_id is not None:
            stmt = stmt.where(Subscriber.guild_id == guild_id)
        try:
            async with self.session() as session:
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount
        except SQLAlchemyError as exc:
            logger.error("Failed to remove subscriber user=%s guild=%s: %s", user_id, guild_id, exc)
            return 0

    async def list_subscribers(self, guild_id: str) -> list[Subscriber]:
        try:
            async with self.session() as session:
                result = await session.execute(
                    select(Subscriber).where(Subscriber.guild_id == guild_id).order_by(Subscriber.created_at)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"could not list subscribers for guild {guild_id}") from exc

    async def count_subscribers(self, guild_id: str) -> int:
        try:
            async with self.session() as session:
                result = await session.execute(
                    select(func.count()).select_from(Subscriber).where(Subscriber.guild_id == guild_id)
                )
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise StorageError(f"could not count subscribers for guild {guild_id}") from exc

    async def set_announcement_channel(self, guild_id: str, channel_id: str, set_by: str) -> AnnouncementChannel:
        """Designate the announcement channel for a guild, replacing any previous one."""
        stmt = sqlite_insert(AnnouncementChannel).values(guild_id=guild_id, channel_id=channel_id, set_by=set_by)
        stmt = stmt.on_conflict_do_update(
            index_elements=["guild_id"],
            set_={
                "channel_id": stmt.excluded.channel_id,
                "set_by": stmt.excluded.set_by,
                "created_at": func.now(),
            },
        )
        try:
            async with self.session() as session:
                await session.execute(stmt)
                await session.commit()
                return await session.get(AnnouncementChannel, guild_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"could not set announcement channel for guild {guild_id}") from exc

    async def get_announcement_channel(self, guild_id: str) -> Optional[str]:
        """Return the channel id, or None when the guild has not set one."""
        try:
            async with self.session() as session:
                record = await session.get(AnnouncementChannel, guild_id)
                return record.channel_id if record is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"could not read announcement channel for guild {guild_id}") from exc
