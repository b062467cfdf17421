from __future__ import annotations

import pytest

from buzzr_bot.errors import ValidationError
from buzzr_bot.phone import (
    display_phone_number,
    format_phone_number,
    is_valid_phone_number,
    mask_phone_number,
    normalize_sender_number,
    parse_phone_number,
)

VALID_TEN_DIGIT = ["2345678900", "9999999999", "2002000000", "8005550199", "4152223333"]


@pytest.mark.parametrize("digits", VALID_TEN_DIGIT)
def test_ten_digit_numbers_validate_and_get_plus_one(digits: str) -> None:
    assert is_valid_phone_number(digits)
    assert format_phone_number(digits) == f"+1{digits}"


@pytest.mark.parametrize("digits", VALID_TEN_DIGIT)
def test_eleven_digit_numbers_with_country_code(digits: str) -> None:
    with_country = "1" + digits
    assert is_valid_phone_number(with_country)
    assert format_phone_number(with_country) == f"+{with_country}"


@pytest.mark.parametrize(
    "raw",
    ["+1-234-567-8900", "(234) 567-8900", "234.567.8900", "1 234 567 8900", " 2345678900 "],
)
def test_accepted_formats(raw: str) -> None:
    assert is_valid_phone_number(raw)
    assert format_phone_number(raw) == "+12345678900"


@pytest.mark.parametrize(
    "raw",
    [
        "0345678900",  # area code starts with 0
        "1345678900",  # area code starts with 1
        "2340678900",  # exchange starts with 0
        "2341678900",  # exchange starts with 1
        "22345678900",  # 11 digits without a leading 1
        "123",
        "",
        "call me maybe",
    ],
)
def test_rejects_out_of_plan_numbers(raw: str) -> None:
    assert not is_valid_phone_number(raw)


def test_validator_never_raises_on_non_strings() -> None:
    assert not is_valid_phone_number(None)  # type: ignore[arg-type]
    assert not is_valid_phone_number(2345678900)  # type: ignore[arg-type]


@pytest.mark.parametrize("raw", ["234567890", "1", "123456789012", "+44 20 7946 0958 12", "22345678900"])
def test_no_canonical_form_outside_ten_or_eleven_digits(raw: str) -> None:
    assert format_phone_number(raw) is None


def test_parse_phone_number() -> None:
    assert parse_phone_number("(234) 567-8900") == "+12345678900"
    with pytest.raises(ValidationError):
        parse_phone_number("555-1234")
    # Formattable but outside the numbering plan.
    with pytest.raises(ValidationError):
        parse_phone_number("1234567890")


def test_normalize_sender_number() -> None:
    assert normalize_sender_number(" +1 (555) 000-1111 ") == "+15550001111"
    assert normalize_sender_number("15550001111") == "+15550001111"
    assert normalize_sender_number("+15550001111\n") == "+15550001111"


def test_display_and_mask() -> None:
    assert display_phone_number("+12345678900") == "+1-234-567-8900"
    assert display_phone_number("unexpected") == "unexpected"
    assert mask_phone_number("+12345678900") == "+1******8900"
    assert mask_phone_number("123") == "***"
