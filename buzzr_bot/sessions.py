"""
Pending SMS signup sessions.

A session is created when a member runs /sms-signup in a guild and lives until
they DM a phone number, until it times out, or until the background sweep
evicts it. Sessions are process-local on purpose: a restart forgets them.

Architecture:
- Plain dict keyed by user id; at most one session per user across all guilds
- Mutations are synchronous, so they never interleave with other handlers
- Background task sweeps expired entries every few minutes
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

SESSION_TIMEOUT_SECONDS = 15 * 60
SWEEP_INTERVAL_SECONDS = 5 * 60
SESSION_TIMEOUT_MINUTES = SESSION_TIMEOUT_SECONDS // 60


@dataclass(frozen=True)
class PendingSignup:
    """Which guild a user is signing up for, and when they started."""

    guild_id: str
    created_at: float


class SessionRegistry:
    """
    Owns every pending signup session.

    Example usage:
        registry = SessionRegistry(timeout=900, sweep_interval=300)
        await registry.start()

        registry.start_session("user_1", "guild_1")
        session = registry.get_session("user_1")
        if session and not registry.is_expired(session):
            ...
        registry.end_session("user_1")

        await registry.stop()
    """

    def __init__(
        self,
        *,
        timeout: float = SESSION_TIMEOUT_SECONDS,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: Dict[str, PendingSignup] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def start_session(self, user_id: str, guild_id: str) -> PendingSignup:
        """Open a session, silently replacing any earlier one for this user."""
        session = PendingSignup(guild_id=guild_id, created_at=self._clock())
        if user_id in self._sessions:
            logger.debug("Replacing pending signup for user=%s", user_id)
        self._sessions[user_id] = session
        return session

    def get_session(self, user_id: str) -> Optional[PendingSignup]:
        """Return the session without judging its age."""
        return self._sessions.get(user_id)

    def end_session(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    def is_expired(self, session: PendingSignup, now: Optional[float] = None) -> bool:
        """A session is expired once it is strictly older than the timeout."""
        if now is None:
            now = self._clock()
        return now - session.created_at > self.timeout

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop every expired session. Returns how many were removed."""
        if now is None:
            now = self._clock()
        expired = [user_id for user_id, session in self._sessions.items() if self.is_expired(session, now)]
        for user_id in expired:
            del self._sessions[user_id]
        if expired:
            logger.info("Swept %d expired signup session(s)", len(expired))
        return len(expired)

    async def start(self) -> None:
        """Start the background sweep."""
        if self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info(
                "SessionRegistry started (timeout=%ss, sweep every %ss)",
                self.timeout,
                self.sweep_interval,
            )

    async def stop(self) -> None:
        """Stop the sweep and forget every pending session."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        dropped = len(self._sessions)
        self._sessions.clear()
        logger.info("SessionRegistry stopped, discarded %d pending session(s)", dropped)

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.sweep_interval)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("Session sweep error: %s", exc)
