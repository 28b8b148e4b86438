"""Application settings with defaults.

Values come from the ``CINEMA`` dict in Django settings; anything missing
falls back to ``DEFAULTS``.
"""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "TICKET_UNIT_PRICE_CENTS": 1000,
    "AUTH_TIMEOUT_SECONDS": 5.0,
    "LEDGER_KEY": "TICKETS_v2",
    "FILMS_PAGE_SIZE": 50,
    "BOOTSTRAP_SESSIONS_PAGE_SIZE": 80,
    "DETAIL_SESSIONS_PAGE_SIZE": 120,
    "MIN_CARD_DIGITS": 12,
    "CURRENCY_SYMBOL": "₽",
}


def cinema_setting(name: str) -> Any:
    """Return a configured value, or its default."""
    overrides = getattr(settings, "CINEMA", {})
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
