from cinema.services.hub import (
    AuthMode,
    AuthOptions,
    AuthOutcome,
    BootstrapOptions,
    BootstrapResult,
    FilmDetailOptions,
    StateHub,
)
from cinema.services.image_cache import ImageCache
from cinema.services.ledger import Checkout, TicketLedger
from cinema.services.payment import luhn_checksum, mask_card, validate_card
from cinema.services.seat_selection import SeatSelection

__all__ = [
    "AuthMode",
    "AuthOptions",
    "AuthOutcome",
    "BootstrapOptions",
    "BootstrapResult",
    "FilmDetailOptions",
    "StateHub",
    "ImageCache",
    "Checkout",
    "TicketLedger",
    "luhn_checksum",
    "mask_card",
    "validate_card",
    "SeatSelection",
]
