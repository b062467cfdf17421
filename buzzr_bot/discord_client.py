"""
Discord client wiring gateway events and slash commands to Buzzr's logic.
"""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

from . import embeds
from .commands import SmsCommands, run_guarded
from .config import Settings
from .routing import (
    ChannelMessage,
    DirectMessage,
    handle_direct_message,
    handle_member_removed,
    relay_announcement,
)
from .sessions import SessionRegistry
from .sms import SmsSender
from .store import SubscriberStore

logger = logging.getLogger(__name__)

RELAYED_REACTION = "📱"


class DiscordGuildDirectory:
    """Guild and membership lookups against the client's cache."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    def _guild(self, guild_id: str) -> Optional[discord.Guild]:
        try:
            return self.client.get_guild(int(guild_id))
        except (TypeError, ValueError):
            return None

    def guild_name(self, guild_id: str) -> Optional[str]:
        guild = self._guild(guild_id)
        return guild.name if guild is not None else None

    def is_member(self, guild_id: str, user_id: str) -> bool:
        guild = self._guild(guild_id)
        return guild is not None and guild.get_member(int(user_id)) is not None


def _is_admin(author: discord.abc.User) -> bool:
    return isinstance(author, discord.Member) and author.guild_permissions.administrator


class BuzzrDiscordClient(discord.Client):
    def __init__(
        self,
        settings: Settings,
        store: SubscriberStore,
        registry: SessionRegistry,
        sms_sender: SmsSender,
        **kwargs,
    ):
        intents = kwargs.pop("intents", discord.Intents.default())
        intents.guilds = True
        intents.guild_messages = True
        intents.message_content = True
        intents.dm_messages = True
        intents.members = True  # Required for membership checks and departures
        super().__init__(intents=intents, **kwargs)

        self.settings = settings
        self.store = store
        self.registry = registry
        self.sms_sender = sms_sender
        self.directory = DiscordGuildDirectory(self)
        self.sms_commands = SmsCommands(store, registry, timeout_minutes=settings.session_timeout_minutes)
        self.tree = app_commands.CommandTree(self)
        self._setup_commands()

    def _setup_commands(self) -> None:
        """Register slash commands on the command tree."""
        handlers = self.sms_commands

        @self.tree.command(name="sms-signup", description="Sign up to receive SMS announcements")
        @app_commands.guild_only()
        async def sms_signup(interaction: discord.Interaction) -> None:
            await run_guarded(interaction, handlers.signup)

        @self.tree.command(name="sms-remove", description="Remove your phone number and stop SMS announcements")
        @app_commands.guild_only()
        async def sms_remove(interaction: discord.Interaction) -> None:
            await run_guarded(interaction, handlers.remove)

        @self.tree.command(
            name="set-announcement-channel",
            description="Set the channel for SMS announcements (Admin only)",
        )
        @app_commands.describe(channel="The channel to monitor for announcements")
        @app_commands.guild_only()
        @app_commands.default_permissions(administrator=True)
        async def set_announcement_channel(interaction: discord.Interaction, channel: discord.TextChannel) -> None:
            await run_guarded(interaction, handlers.set_announcement_channel, channel)

        @self.tree.command(name="sms-status", description="Check SMS announcement settings (Admin only)")
        @app_commands.guild_only()
        @app_commands.default_permissions(administrator=True)
        async def sms_status(interaction: discord.Interaction) -> None:
            await run_guarded(interaction, handlers.status)

    async def setup_hook(self) -> None:
        await self.registry.start()
        try:
            if self.settings.guild_id:
                guild = discord.Object(id=self.settings.guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info("Slash commands synced for guild %s", self.settings.guild_id)
            else:
                await self.tree.sync()
                logger.info("Slash commands synced globally")
        except Exception as exc:
            logger.warning("Failed to sync slash commands: %s", exc)

    async def close(self) -> None:
        await self.registry.stop()
        await super().close()

    async def on_ready(self):
        logger.info("Logged in as %s", self.user)
        logger.info("SMS bot is ready and monitoring %d guild(s)", len(self.guilds))

    async def on_member_remove(self, member: discord.Member):
        await handle_member_removed(str(member.id), str(member.guild.id), self.store)

    async def on_message(self, message: discord.Message):
        if message.author.bot:
            return
        if isinstance(message.channel, discord.DMChannel):
            await self._handle_direct_message(message)
        elif message.guild is not None:
            await self._handle_channel_message(message)

    async def _handle_direct_message(self, message: discord.Message) -> None:
        result = await handle_direct_message(
            DirectMessage(user_id=str(message.author.id), content=message.content),
            self.registry,
            self.store,
            self.directory,
        )
        try:
            await message.reply(embed=embeds.for_signup_result(result, self.settings.session_timeout_minutes))
        except discord.HTTPException as exc:
            logger.warning("Failed to reply to DM from user=%s: %s", message.author.id, exc)

    async def _handle_channel_message(self, message: discord.Message) -> None:
        try:
            result = await relay_announcement(
                ChannelMessage(
                    guild_id=str(message.guild.id),
                    guild_name=message.guild.name,
                    channel_id=str(message.channel.id),
                    author_id=str(message.author.id),
                    content=message.content,
                ),
                self.store,
                self.sms_sender,
            )
            if result is None:
                return

            try:
                await message.add_reaction(RELAYED_REACTION)
            except discord.HTTPException as exc:
                logger.warning("Failed to react to announcement message=%s: %s", message.id, exc)

            if _is_admin(message.author):
                try:
                    await message.channel.send(
                        embed=embeds.relay_summary(result),
                        delete_after=self.settings.relay_summary_delete_after_seconds,
                    )
                except discord.HTTPException as exc:
                    logger.warning("Failed to post relay summary in channel=%s: %s", message.channel.id, exc)
        except Exception as exc:
            logger.exception("Error processing announcement message: %s", exc)
