"""Domain models representing remote and locally persisted state.

These are pure domain objects. Records fetched from the remote service are
compared by ``id`` only: every other field is excluded from equality and
hashing so a refetched record is interchangeable with the cached one.
"""

from dataclasses import dataclass, field
from enum import Enum

from cinema.domain.value_objects import Money, SeatKey


@dataclass(frozen=True)
class Poster:
    """Reference to a film's poster image in the remote media store."""

    id: str
    filename: str = field(default="", compare=False)
    content_type: str = field(default="", compare=False)
    media_type: str = field(default="", compare=False)
    created_at: str = field(default="", compare=False)
    updated_at: str = field(default="", compare=False)


@dataclass(frozen=True)
class Film:
    """Domain representation of a Film."""

    id: str
    title: str = field(compare=False)
    description: str = field(compare=False)
    duration_minutes: int = field(compare=False)
    age_rating: str = field(compare=False)
    poster: Poster = field(compare=False)
    created_at: str = field(default="", compare=False)
    updated_at: str = field(default="", compare=False)


@dataclass(frozen=True)
class Timeslot:
    start: str
    end: str


@dataclass(frozen=True)
class Session:
    """Domain representation of a screening Session."""

    id: str
    film_id: str = field(compare=False)
    hall_id: str = field(compare=False)
    start_at: str = field(compare=False)
    timeslot: Timeslot | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Hall:
    """Domain representation of a Hall."""

    id: str
    name: str = field(compare=False)
    number: int = field(compare=False)
    created_at: str = field(default="", compare=False)
    updated_at: str = field(default="", compare=False)


class SeatStatus(Enum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    RESERVED = "Reserved"
    BLOCKED = "Blocked"


@dataclass(frozen=True)
class SeatCategory:
    """Pricing category a seat belongs to."""

    id: str
    name: str
    price: Money


@dataclass(frozen=True)
class Seat:
    """Domain representation of a Seat inside a hall plan."""

    id: str
    row: int = field(compare=False)
    number: int = field(compare=False)
    category_id: str = field(compare=False)
    status: SeatStatus = field(compare=False)

    @property
    def key(self) -> SeatKey:
        return SeatKey(row=self.row, number=self.number)

    @property
    def is_available(self) -> bool:
        return self.status is SeatStatus.AVAILABLE


@dataclass(frozen=True)
class HallPlan:
    """Seat layout of one hall at a point in time."""

    hall_id: str
    rows: int
    seats: tuple[Seat, ...] = ()
    categories: tuple[SeatCategory, ...] = ()


@dataclass(frozen=True)
class Review:
    """Domain representation of a film Review."""

    id: str
    film_id: str
    author_id: str
    rating: int
    text: str
    created_at: str


@dataclass(frozen=True)
class UserProfile:
    """Cached snapshot of the signed-in user's profile."""

    id: str
    email: str
    first_name: str
    last_name: str
    gender: str
    role: str
    age: int | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class Credentials:
    """Login or registration input.

    Name, age and gender are only sent when registering.
    """

    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    age: int = 0
    gender: str = ""


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a login or register call as reported by the gateway."""

    token: str
    ok: bool
    message: str | None = None


@dataclass(frozen=True)
class PurchaseRequest:
    """Everything needed to record a completed purchase.

    ``card_number`` is only used to derive the masked card; it is never
    persisted.
    """

    film_id: str
    film_title: str
    poster_id: str
    session_id: str
    hall_name: str
    hall_number: int
    start_at: str
    seats: tuple[str, ...]
    card_number: str
    card_expiry: str


@dataclass(frozen=True)
class Ticket:
    """A purchased ticket as held in the local ledger."""

    id: str
    film_id: str
    film_title: str
    poster_id: str
    session_id: str
    hall_name: str
    hall_number: int
    start_at: str
    seats: tuple[str, ...]
    total: Money
    masked_card: str
    card_expiry: str
