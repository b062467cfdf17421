"""Exception types shared across the bot."""

from __future__ import annotations


class BuzzrError(Exception):
    """Base class for every error raised by the bot itself."""


class ValidationError(BuzzrError):
    """Malformed user input, usually a phone number. Correctable by the user."""


class StorageError(BuzzrError):
    """The subscriber database could not be read or written."""


class PlatformError(BuzzrError):
    """Discord refused to deliver a reply or direct message."""


class ExternalDeliveryError(BuzzrError):
    """A single SMS could not be handed to the carrier."""

    def __init__(self, to_number: str, reason: str) -> None:
        super().__init__(f"SMS delivery to {to_number} failed: {reason}")
        self.to_number = to_number
        self.reason = reason
