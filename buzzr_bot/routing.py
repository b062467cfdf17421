"""
Decides what each inbound event means and drives the store, the session
registry and the SMS sender accordingly.

Nothing here imports discord: events arrive as small dataclasses and results
go back as values, which the Discord client renders into replies.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .errors import StorageError, ValidationError
from .phone import mask_phone_number, parse_phone_number
from .sessions import SessionRegistry
from .sms import SmsSender
from .store import SubscriberStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectMessage:
    user_id: str
    content: str


@dataclass(frozen=True)
class ChannelMessage:
    guild_id: str
    guild_name: str
    channel_id: str
    author_id: str
    content: str


class GuildDirectory(Protocol):
    """Read-only view of the guilds the bot can currently see."""

    def guild_name(self, guild_id: str) -> Optional[str]:
        """Name of the guild, or None when it is no longer reachable."""
        ...

    def is_member(self, guild_id: str, user_id: str) -> bool:
        ...


class SignupStatus(enum.Enum):
    NO_SESSION = "no_session"
    EXPIRED = "expired"
    INVALID_NUMBER = "invalid_number"
    GUILD_UNAVAILABLE = "guild_unavailable"
    NOT_A_MEMBER = "not_a_member"
    REGISTERED = "registered"
    STORAGE_FAILED = "storage_failed"


@dataclass(frozen=True)
class SignupResult:
    status: SignupStatus
    guild_name: Optional[str] = None
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class RelayResult:
    delivered: int
    total: int

    @property
    def failed(self) -> int:
        return self.total - self.delivered


def announcement_body(guild_name: str, content: str) -> str:
    return f"📢 Announcement from {guild_name}:\n\n{content}"


async def handle_direct_message(
    message: DirectMessage,
    registry: SessionRegistry,
    store: SubscriberStore,
    directory: GuildDirectory,
) -> SignupResult:
    """
    Treat a DM as the answer to a pending /sms-signup.

    An invalid number leaves the session open so the user can retry until it
    times out. Every other terminal outcome consumes the session.
    """
    user_id = message.user_id
    session = registry.get_session(user_id)
    if session is None:
        return SignupResult(SignupStatus.NO_SESSION)

    if registry.is_expired(session):
        registry.end_session(user_id)
        logger.info("Signup session expired for user=%s", user_id)
        return SignupResult(SignupStatus.EXPIRED)

    try:
        phone_number = parse_phone_number(message.content.strip())
    except ValidationError:
        return SignupResult(SignupStatus.INVALID_NUMBER)

    guild_name = directory.guild_name(session.guild_id)
    if guild_name is None:
        registry.end_session(user_id)
        logger.warning("Guild %s unreachable while completing signup for user=%s", session.guild_id, user_id)
        return SignupResult(SignupStatus.GUILD_UNAVAILABLE)

    if not directory.is_member(session.guild_id, user_id):
        registry.end_session(user_id)
        return SignupResult(SignupStatus.NOT_A_MEMBER, guild_name=guild_name)

    try:
        await store.upsert_subscriber(user_id, session.guild_id, phone_number)
    except StorageError as exc:
        logger.error("Database error during SMS signup user=%s: %s", user_id, exc)
        return SignupResult(SignupStatus.STORAGE_FAILED, guild_name=guild_name)
    finally:
        registry.end_session(user_id)

    logger.info(
        "Registered %s for SMS announcements in guild=%s user=%s",
        mask_phone_number(phone_number),
        session.guild_id,
        user_id,
    )
    return SignupResult(SignupStatus.REGISTERED, guild_name=guild_name, phone_number=phone_number)


async def relay_announcement(
    message: ChannelMessage,
    store: SubscriberStore,
    sender: SmsSender,
) -> Optional[RelayResult]:
    """
    Fan a guild message out over SMS if it was posted in the announcement channel.

    Returns None when the message is not an announcement or nobody is
    subscribed. Sends go out one at a time; a failed recipient is counted and
    skipped. Storage errors propagate to the caller.
    """
    channel_id = await store.get_announcement_channel(message.guild_id)
    if channel_id is None or channel_id != message.channel_id:
        return None

    subscribers = await store.list_subscribers(message.guild_id)
    if not subscribers:
        return None

    body = announcement_body(message.guild_name, message.content)
    delivered = 0
    for subscriber in subscribers:
        if await sender.send(subscriber.phone_number, body):
            delivered += 1

    result = RelayResult(delivered=delivered, total=len(subscribers))
    logger.info(
        "Relayed announcement guild=%s channel=%s delivered=%d/%d",
        message.guild_id,
        message.channel_id,
        result.delivered,
        result.total,
    )
    return result


async def handle_member_removed(user_id: str, guild_id: str, store: SubscriberStore) -> bool:
    """Forget a departed member's number for that guild. Never raises."""
    removed = await store.remove_subscriber_by_user(user_id, guild_id)
    if removed:
        logger.info("Removed user=%s from SMS notifications for guild=%s", user_id, guild_id)
    return removed > 0
