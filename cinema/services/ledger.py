"""Ticket ledger and checkout.

The ledger is append-only and newest-first. Every append rewrites the whole
ledger to the blob store before returning.
"""

import asyncio
import logging
import uuid

from cinema.conf import cinema_setting
from cinema.domain import Film, Hall, Money, PurchaseRequest, Session, Ticket
from cinema.domain.errors import LedgerFormatError
from cinema.serializers import dump_ledger, load_ledger
from cinema.services.payment import mask_card, validate_card
from cinema.services.seat_selection import SeatSelection
from cinema.stores.interfaces import BlobStore

logger = logging.getLogger(__name__)


class TicketLedger:
    """Local record of completed purchases."""

    def __init__(
        self,
        store: BlobStore,
        key: str | None = None,
        unit_price: Money | None = None,
    ) -> None:
        self._store = store
        self._key = key or cinema_setting("LEDGER_KEY")
        if unit_price is None:
            unit_price = Money(cinema_setting("TICKET_UNIT_PRICE_CENTS"))
        self._unit_price = unit_price
        self._tickets: list[Ticket] = []
        self._lock = asyncio.Lock()

    @property
    def tickets(self) -> tuple[Ticket, ...]:
        """Snapshot of the ledger, newest first."""
        return tuple(self._tickets)

    async def append(self, request: PurchaseRequest) -> Ticket:
        """Record a purchase and persist the ledger.

        If the write fails the error propagates and the in-memory ledger is
        left unchanged.
        """
        ticket = Ticket(
            id=str(uuid.uuid4()).upper(),
            film_id=request.film_id,
            film_title=request.film_title,
            poster_id=request.poster_id,
            session_id=request.session_id,
            hall_name=request.hall_name,
            hall_number=request.hall_number,
            start_at=request.start_at,
            seats=tuple(request.seats),
            total=self._unit_price * len(request.seats),
            masked_card=mask_card(request.card_number),
            card_expiry=request.card_expiry,
        )
        async with self._lock:
            tickets = [ticket, *self._tickets]
            await self._store.write_blob(self._key, dump_ledger(tickets))
            self._tickets = tickets
        logger.info(
            "Stored ticket %s for %s (%d seats)",
            ticket.id,
            ticket.film_title,
            len(ticket.seats),
        )
        return ticket

    async def reload(self) -> tuple[Ticket, ...]:
        """Replace the in-memory ledger with the stored one.

        A missing blob yields an empty ledger. An unreadable blob is logged
        and leaves the in-memory ledger as it was.
        """
        async with self._lock:
            payload = await self._store.read_blob(self._key)
            if payload is None:
                self._tickets = []
            else:
                try:
                    self._tickets = load_ledger(payload)
                except LedgerFormatError:
                    logger.exception("Could not read ticket ledger %r", self._key)
        return self.tickets


class Checkout:
    """Validates payment details and commits a seat selection to the ledger."""

    def __init__(self, ledger: TicketLedger) -> None:
        self._ledger = ledger

    async def pay(
        self,
        selection: SeatSelection,
        film: Film,
        session: Session,
        hall: Hall | None,
        card_number: str,
        card_expiry: str,
    ) -> Ticket | None:
        """Return the stored ticket, or None if the purchase was refused."""
        if selection.count == 0:
            logger.info("Refusing checkout with no seats selected")
            return None
        if not validate_card(card_number, card_expiry):
            logger.info("Refusing checkout: card details rejected")
            return None
        request = PurchaseRequest(
            film_id=film.id,
            film_title=film.title,
            poster_id=film.poster.id,
            session_id=session.id,
            hall_name=hall.name if hall else "",
            hall_number=hall.number if hall else 0,
            start_at=session.start_at,
            seats=tuple(selection.selected_keys()),
            card_number=card_number,
            card_expiry=card_expiry,
        )
        try:
            ticket = await self._ledger.append(request)
        except Exception:
            logger.exception("Could not store ticket for session %s", session.id)
            return None
        selection.reset()
        return ticket
