"""SMS sending through Twilio."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from .errors import ExternalDeliveryError
from .phone import mask_phone_number, normalize_sender_number

logger = logging.getLogger(__name__)


class SmsGateway(Protocol):
    """Protocol describing an SMS carrier."""

    async def send(self, from_number: str, to_number: str, body: str) -> None:
        """Hand one message to the carrier or raise ExternalDeliveryError."""
        ...


class TwilioSmsGateway:
    """Twilio based SMS gateway."""

    def __init__(self, account_sid: str, auth_token: str, client: TwilioClient | None = None) -> None:
        self._client = client or TwilioClient(account_sid, auth_token)

    async def send(self, from_number: str, to_number: str, body: str) -> None:
        try:
            # The Twilio SDK is blocking; keep it off the event loop.
            message = await asyncio.to_thread(
                self._client.messages.create,
                body=body,
                from_=from_number,
                to=to_number,
            )
        except TwilioException as exc:
            raise ExternalDeliveryError(to_number, str(exc)) from exc
        except OSError as exc:
            raise ExternalDeliveryError(to_number, f"network error: {exc}") from exc
        except Exception as exc:
            # Anything else the SDK throws still only fails this recipient.
            raise ExternalDeliveryError(to_number, f"unexpected error: {exc!r}") from exc
        logger.debug("Twilio accepted sid=%s to=%s", getattr(message, "sid", "<no-sid>"), mask_phone_number(to_number))


class SmsSender:
    """
    Sends from the bot's configured number and turns failures into a boolean,
    so one bad recipient never interrupts a broadcast.
    """

    def __init__(self, gateway: SmsGateway, from_number: str) -> None:
        self.gateway = gateway
        self.from_number = normalize_sender_number(from_number)

    async def send(self, to_number: str, body: str) -> bool:
        try:
            await self.gateway.send(self.from_number, to_number, body)
        except ExternalDeliveryError as exc:
            logger.error("Failed to send SMS to %s: %s", mask_phone_number(to_number), exc.reason)
            return False
        logger.info("Sent SMS from %s to %s", self.from_number, mask_phone_number(to_number))
        return True
