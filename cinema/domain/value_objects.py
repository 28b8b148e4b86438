"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self

from cinema.conf import cinema_setting


@dataclass(frozen=True, order=True)
class SeatKey:
    """User-facing selection key of a seat within one hall plan."""

    row: int
    number: int

    def __post_init__(self) -> None:
        if self.row < 1 or self.number < 1:
            raise ValueError("Seat row and number are 1-based")

    @classmethod
    def from_string(cls, value: str) -> Self:
        row, sep, number = value.partition("-")
        if not sep:
            raise ValueError(f"Invalid seat key: {value!r}")
        return cls(row=int(row), number=int(number))

    def __str__(self) -> str:
        return f"{self.row}-{self.number}"


@dataclass(frozen=True)
class Money:
    """Price in minor currency units (cents)."""

    cents: int

    def __post_init__(self) -> None:
        if self.cents < 0:
            raise ValueError("Money amount cannot be negative")

    def __mul__(self, count: int) -> "Money":
        return Money(self.cents * count)

    def format(self, symbol: str) -> str:
        return f"{self.cents / 100:.0f} {symbol}"

    def __str__(self) -> str:
        return self.format(cinema_setting("CURRENCY_SYMBOL"))
