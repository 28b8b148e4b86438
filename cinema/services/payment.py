"""Card masking and shape validation.

The validator only checks the shape of its inputs. The Luhn checksum is
computed but does not affect the result, and the expiry is compared as a
plain string against ``"00/00"``.
"""

import string

from cinema.conf import cinema_setting

CARD_MASK = "**** **** ****"


def card_digits(number: str) -> str:
    """ASCII digits of the card number; anything else is dropped."""
    return "".join(ch for ch in number if ch in string.digits)


def mask_card(number: str) -> str:
    """Return the card number with everything but the last four digits masked."""
    return f"{CARD_MASK} {card_digits(number)[-4:]}"


def luhn_checksum(number: str) -> int:
    """Luhn sum of the card's digits; a valid number gives a multiple of 10."""
    total = 0
    for index, digit in enumerate(int(ch) for ch in reversed(card_digits(number))):
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total


def validate_card(number: str, expiry: str) -> bool:
    if len(card_digits(number)) < cinema_setting("MIN_CARD_DIGITS"):
        return False
    # Not enforced: a failing checksum does not reject the card.
    luhn_checksum(number)
    if "/" not in expiry:
        return False
    return expiry > "00/00"
