"""
Phone number validation and formatting.

Only North American Numbering Plan numbers are accepted. Validation and
formatting both work on the same digits-only form, so a number that validates
always has a canonical ``+1XXXXXXXXXX`` form.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import ValidationError

_NON_DIGITS = re.compile(r"\D")
_NON_DIALABLE = re.compile(r"[^+\d]")
# Optional country code, then area code and exchange that cannot start with 0 or 1.
_NANP = re.compile(r"^1?[2-9]\d{2}[2-9]\d{2}\d{4}$")
_CANONICAL = re.compile(r"^(\+1)(\d{3})(\d{3})(\d{4})$")


def strip_digits(raw: str) -> str:
    return _NON_DIGITS.sub("", raw)


def is_valid_phone_number(raw: str) -> bool:
    if not isinstance(raw, str):
        return False
    return _NANP.match(strip_digits(raw)) is not None


def format_phone_number(raw: str) -> Optional[str]:
    """
    Canonicalise user input.

    10 digits get a ``+1`` prefix, 11 digits starting with ``1`` get ``+``.
    Anything else has no canonical form and yields None. Callers still need
    :func:`is_valid_phone_number` to decide whether to trust the result.
    """
    digits = strip_digits(raw)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return None


def normalize_sender_number(raw: str) -> str:
    """Turn the configured Twilio number into something dialable: ``+`` then digits."""
    number = _NON_DIALABLE.sub("", (raw or "").strip())
    if not number.startswith("+"):
        number = "+" + number
    return number


def display_phone_number(canonical: str) -> str:
    """``+12345678900`` -> ``+1-234-567-8900``. Other shapes pass through."""
    return _CANONICAL.sub(r"\1-\2-\3-\4", canonical)


def mask_phone_number(number: str) -> str:
    """Keep only the last four digits, for logs."""
    if len(number) <= 4:
        return "*" * len(number)
    prefix = "+1" if number.startswith("+1") else ""
    hidden = len(number) - len(prefix) - 4
    return f"{prefix}{'*' * hidden}{number[-4:]}"


def parse_phone_number(raw: str) -> str:
    """Validate and canonicalise in one step, raising ValidationError on bad input."""
    canonical = format_phone_number(raw) if is_valid_phone_number(raw) else None
    if canonical is None:
        raise ValidationError(f"not a valid US phone number: {raw!r}")
    return canonical
