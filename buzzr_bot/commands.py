"""
Slash command handlers: /sms-signup, /sms-remove, /set-announcement-channel
and /sms-status.

Every handler ends in exactly one reply to the interaction.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import discord

from . import embeds
from .errors import PlatformError, StorageError
from .sessions import SESSION_TIMEOUT_MINUTES, SessionRegistry
from .store import SubscriberStore

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "❌ An error occurred while processing your request."
DM_BLOCKED = "❌ I couldn't send you a DM. Please make sure your DMs are open and try again."


async def send_dm(user: discord.abc.User, **kwargs: Any) -> discord.Message:
    try:
        return await user.send(**kwargs)
    except discord.HTTPException as exc:
        raise PlatformError(f"could not DM user {user.id}: {exc}") from exc


async def run_guarded(
    interaction: discord.Interaction,
    handler: Callable[..., Awaitable[None]],
    *args: Any,
) -> None:
    """
    Run a command handler, turning any uncaught error into one generic reply.

    Discord rejects a second response to the same interaction, so the fallback
    is only sent when nothing has been sent yet.
    """
    try:
        await handler(interaction, *args)
    except Exception as exc:
        command = interaction.command.name if interaction.command else "unknown"
        logger.exception("Error handling /%s for user=%s: %s", command, interaction.user.id, exc)
        if not interaction.response.is_done():
            try:
                await interaction.response.send_message(GENERIC_FAILURE, ephemeral=True)
            except discord.HTTPException as reply_exc:
                logger.warning("Could not send failure reply: %s", reply_exc)


class SmsCommands:
    def __init__(
        self,
        store: SubscriberStore,
        registry: SessionRegistry,
        *,
        timeout_minutes: int = SESSION_TIMEOUT_MINUTES,
    ) -> None:
        self.store = store
        self.registry = registry
        self.timeout_minutes = timeout_minutes

    async def signup(self, interaction: discord.Interaction) -> None:
        user_id = str(interaction.user.id)
        guild = interaction.guild
        self.registry.start_session(user_id, str(guild.id))
        try:
            await send_dm(interaction.user, embed=embeds.signup_dm(guild.name, self.timeout_minutes))
        except PlatformError as exc:
            self.registry.end_session(user_id)
            logger.info("Signup DM blocked: %s", exc)
            await interaction.response.send_message(DM_BLOCKED, ephemeral=True)
            return
        logger.info("Started SMS signup user=%s guild=%s", user_id, guild.id)
        await interaction.response.send_message(embed=embeds.signup_started(), ephemeral=True)

    async def remove(self, interaction: discord.Interaction) -> None:
        try:
            removed = await self.store.remove_subscriber(str(interaction.user.id), str(interaction.guild_id))
        except StorageError as exc:
            logger.error("Failed to remove subscriber: %s", exc)
            await interaction.response.send_message("❌ Error removing your phone number.", ephemeral=True)
            return
        if removed:
            await interaction.response.send_message(
                "✅ Your phone number has been removed. You will no longer receive SMS announcements.",
                ephemeral=True,
            )
        else:
            await interaction.response.send_message(
                "❌ You don't have a phone number registered for this server.",
                ephemeral=True,
            )

    async def set_announcement_channel(self, interaction: discord.Interaction, channel: discord.abc.GuildChannel) -> None:
        try:
            await self.store.set_announcement_channel(
                str(interaction.guild_id), str(channel.id), str(interaction.user.id)
            )
        except StorageError as exc:
            logger.error("Failed to set announcement channel: %s", exc)
            await interaction.response.send_message("❌ Error setting announcement channel.", ephemeral=True)
            return
        logger.info(
            "Announcement channel for guild=%s set to %s by user=%s",
            interaction.guild_id,
            channel.id,
            interaction.user.id,
        )
        await interaction.response.send_message(embed=embeds.channel_set(channel.id))

    async def status(self, interaction: discord.Interaction) -> None:
        guild_id = str(interaction.guild_id)
        channel_id = await self.store.get_announcement_channel(guild_id)
        count = await self.store.count_subscribers(guild_id)
        await interaction.response.send_message(embed=embeds.status(channel_id, count), ephemeral=True)
