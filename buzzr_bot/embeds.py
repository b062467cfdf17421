"""
Embeds for every notice the bot shows.
"""

from __future__ import annotations

from typing import Optional

import discord

from .phone import display_phone_number
from .routing import RelayResult, SignupResult, SignupStatus

BLUE = 0x0099FF
GREEN = 0x00FF00
RED = 0xFF0000
AMBER = 0xFFAA00

ACCEPTED_FORMATS = "• +1-234-567-8900\n• (234) 567-8900\n• 2345678900"


def signup_dm(guild_name: str, timeout_minutes: int) -> discord.Embed:
    embed = discord.Embed(
        colour=BLUE,
        title="📱 SMS Signup - Send Your Phone Number",
        description=f"Please send your phone number in this DM to complete SMS signup for **{guild_name}**.",
    )
    embed.add_field(name="📞 Accepted Formats", value=ACCEPTED_FORMATS, inline=False)
    embed.add_field(
        name="⏰ Session Timeout",
        value=f"This session will expire in {timeout_minutes} minutes.",
        inline=False,
    )
    embed.set_footer(text="Your phone number will only be used for server announcements.")
    return embed


def signup_started() -> discord.Embed:
    embed = discord.Embed(colour=BLUE, title="📱 SMS Signup", description="Check your DMs to complete SMS signup!")
    embed.set_footer(text="Your phone number will be kept secure and only used for announcements.")
    return embed


def signup_help() -> discord.Embed:
    return discord.Embed(
        colour=AMBER,
        title="📱 SMS Signup",
        description=(
            "To sign up for SMS announcements, please use the `/sms-signup` command "
            "in the server you want to receive notifications from."
        ),
    )


def session_expired() -> discord.Embed:
    return discord.Embed(
        colour=RED,
        title="⏰ Session Expired",
        description=(
            "Your SMS signup session has expired. "
            "Please use the `/sms-signup` command again in your desired server."
        ),
    )


def invalid_number(timeout_minutes: int) -> discord.Embed:
    return discord.Embed(
        colour=RED,
        title="❌ Invalid Phone Number",
        description=(
            "Please provide a valid US phone number.\n\n"
            f"**Format examples:**\n{ACCEPTED_FORMATS}\n\n"
            f"*Session expires in {timeout_minutes} minutes from initial signup command.*"
        ),
    )


def guild_unavailable() -> discord.Embed:
    return discord.Embed(
        colour=RED,
        title="❌ Server Unavailable",
        description="The server you signed up from is no longer accessible. Please try again.",
    )


def not_a_member(guild_name: str) -> discord.Embed:
    return discord.Embed(
        colour=RED,
        title="❌ Not a Member",
        description=f"You are no longer a member of **{guild_name}**. Please rejoin the server and try again.",
    )


def database_error() -> discord.Embed:
    return discord.Embed(
        colour=RED,
        title="❌ Database Error",
        description="There was an error saving your phone number. Please try again later.",
    )


def signup_complete(guild_name: str, phone_number: str) -> discord.Embed:
    embed = discord.Embed(
        colour=GREEN,
        title="✅ SMS Signup Complete",
        description=f"Your phone number has been registered for SMS announcements in **{guild_name}**.",
    )
    embed.add_field(name="Phone Number", value=display_phone_number(phone_number), inline=True)
    embed.add_field(name="Server", value=guild_name, inline=True)
    embed.set_footer(text="You can remove your number anytime using /sms-remove")
    return embed


def for_signup_result(result: SignupResult, timeout_minutes: int) -> discord.Embed:
    """Pick the DM reply for a routed signup attempt."""
    status = result.status
    if status is SignupStatus.NO_SESSION:
        return signup_help()
    if status is SignupStatus.EXPIRED:
        return session_expired()
    if status is SignupStatus.INVALID_NUMBER:
        return invalid_number(timeout_minutes)
    if status is SignupStatus.GUILD_UNAVAILABLE:
        return guild_unavailable()
    if status is SignupStatus.NOT_A_MEMBER:
        return not_a_member(result.guild_name or "that server")
    if status is SignupStatus.STORAGE_FAILED:
        return database_error()
    return signup_complete(result.guild_name or "", result.phone_number or "")


def channel_set(channel_id: int | str) -> discord.Embed:
    embed = discord.Embed(
        colour=GREEN,
        title="✅ Announcement Channel Set",
        description=(
            f"Messages sent in <#{channel_id}> will now be forwarded as SMS announcements to subscribed users."
        ),
    )
    embed.add_field(name="Channel", value=f"<#{channel_id}>", inline=True)
    return embed


def status(channel_id: Optional[str], subscriber_count: int) -> discord.Embed:
    embed = discord.Embed(colour=BLUE, title="📊 SMS Announcement Status")
    embed.add_field(
        name="Announcement Channel",
        value=f"<#{channel_id}>" if channel_id else "Not set",
        inline=True,
    )
    embed.add_field(name="Subscribed Users", value=str(subscriber_count), inline=True)
    return embed


def relay_summary(result: RelayResult) -> discord.Embed:
    embed = discord.Embed(
        colour=GREEN,
        title="📱 SMS Sent",
        description=f"Announcement sent via SMS to {result.delivered}/{result.total} subscribed users.",
    )
    embed.set_footer(text="This message is only visible to administrators")
    return embed
