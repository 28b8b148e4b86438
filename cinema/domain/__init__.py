from cinema.domain.models import (
    AuthResult,
    Credentials,
    Film,
    Hall,
    HallPlan,
    Poster,
    PurchaseRequest,
    Review,
    Seat,
    SeatCategory,
    SeatStatus,
    Session,
    Ticket,
    Timeslot,
    UserProfile,
)
from cinema.domain.value_objects import Money, SeatKey

__all__ = [
    "AuthResult",
    "Credentials",
    "Film",
    "Hall",
    "HallPlan",
    "Poster",
    "PurchaseRequest",
    "Review",
    "Seat",
    "SeatCategory",
    "SeatStatus",
    "Session",
    "Ticket",
    "Timeslot",
    "UserProfile",
    "Money",
    "SeatKey",
]
