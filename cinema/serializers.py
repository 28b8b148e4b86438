"""Serializers for the ticket ledger's on-disk format.

Records keep the field names the ledger has always used (``filmId``,
``totalCents``, ...). The envelope carries a schema version so fields can be
added later; a bare list of records is read as version 1.
"""

import io

from rest_framework import serializers
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser
from rest_framework.renderers import JSONRenderer

from cinema.domain import Money, Ticket
from cinema.domain.errors import LedgerFormatError

LEDGER_SCHEMA_VERSION = 1


class TicketSerializer(serializers.Serializer):
    """Serializer for the Ticket domain model."""

    id = serializers.CharField()
    filmId = serializers.CharField(source="film_id")
    filmTitle = serializers.CharField(source="film_title", allow_blank=True)
    posterId = serializers.CharField(source="poster_id", allow_blank=True, default="")
    sessionId = serializers.CharField(source="session_id")
    hallName = serializers.CharField(source="hall_name", allow_blank=True, default="")
    hallNumber = serializers.IntegerField(source="hall_number", default=0)
    startAtISO = serializers.CharField(source="start_at", allow_blank=True, default="")
    seats = serializers.ListField(child=serializers.CharField())
    totalCents = serializers.IntegerField(source="total.cents", min_value=0)
    maskedCard = serializers.CharField(source="masked_card", allow_blank=True)
    cardExpiry = serializers.CharField(source="card_expiry", allow_blank=True)

    def create(self, validated_data: dict) -> Ticket:
        return Ticket(
            id=validated_data["id"],
            film_id=validated_data["film_id"],
            film_title=validated_data["film_title"],
            poster_id=validated_data["poster_id"],
            session_id=validated_data["session_id"],
            hall_name=validated_data["hall_name"],
            hall_number=validated_data["hall_number"],
            start_at=validated_data["start_at"],
            seats=tuple(validated_data["seats"]),
            total=Money(validated_data["total"]["cents"]),
            masked_card=validated_data["masked_card"],
            card_expiry=validated_data["card_expiry"],
        )


class LedgerSerializer(serializers.Serializer):
    """Versioned envelope around the ordered ticket records."""

    version = serializers.IntegerField(min_value=1)
    tickets = TicketSerializer(many=True)


def dump_ledger(tickets: list[Ticket]) -> bytes:
    data = LedgerSerializer(
        {"version": LEDGER_SCHEMA_VERSION, "tickets": tickets}
    ).data
    return JSONRenderer().render(data)


def load_ledger(payload: bytes) -> list[Ticket]:
    """Decode a stored ledger, newest ticket first.

    Raises:
        LedgerFormatError: If the payload is not a readable ledger.
    """
    try:
        raw = JSONParser().parse(io.BytesIO(payload))
    except ParseError as exc:
        raise LedgerFormatError(str(exc.detail)) from exc
    if isinstance(raw, list):
        raw = {"version": LEDGER_SCHEMA_VERSION, "tickets": raw}
    serializer = LedgerSerializer(data=raw)
    if not serializer.is_valid():
        raise LedgerFormatError(str(serializer.errors))
    ticket_serializer = TicketSerializer()
    return [
        ticket_serializer.create(record)
        for record in serializer.validated_data["tickets"]
    ]
