"""Collaborator interfaces (repository pattern).

The core depends only on these. Implementations must be swappable and
return domain models. Gateways signal failure by raising; a missing token is
a failure of the call, not something checked up front.
"""

from abc import ABC, abstractmethod
from typing import Any

from cinema.domain import (
    AuthResult,
    Credentials,
    Film,
    Hall,
    HallPlan,
    Review,
    SeatCategory,
    Session,
    UserProfile,
)


class RemoteGateway(ABC):
    """Typed request/response surface of the remote cinema service."""

    @abstractmethod
    async def list_films(self, page: int, size: int) -> list[Film]:
        ...

    @abstractmethod
    async def get_film(self, film_id: str) -> Film:
        ...

    @abstractmethod
    async def fetch_image(self, image_id: str) -> bytes:
        """Return the raw bytes of a media item."""
        ...

    @abstractmethod
    async def register(self, credentials: Credentials) -> AuthResult:
        ...

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    async def get_profile(self, token: str | None) -> UserProfile:
        ...

    @abstractmethod
    async def update_profile(
        self, fields: dict[str, Any], token: str | None
    ) -> UserProfile:
        ...

    @abstractmethod
    async def list_seat_categories(
        self, page: int, size: int, token: str | None
    ) -> list[SeatCategory]:
        ...

    @abstractmethod
    async def list_reviews(
        self, film_id: str, page: int, size: int, token: str | None
    ) -> list[Review]:
        ...

    @abstractmethod
    async def add_review(
        self, film_id: str, rating: int, text: str, token: str | None
    ) -> Review:
        ...

    @abstractmethod
    async def list_sessions(
        self,
        page: int,
        size: int,
        film_id: str | None,
        date: str | None,
        token: str | None,
    ) -> list[Session]:
        """Return sessions, optionally filtered by film and by date (YYYY-MM-DD)."""
        ...

    @abstractmethod
    async def get_hall_plan(self, hall_id: str, token: str | None) -> HallPlan:
        ...

    @abstractmethod
    async def get_hall(self, hall_id: str, token: str | None) -> Hall:
        ...


class CredentialStore(ABC):
    """Holder of the opaque bearer token."""

    @abstractmethod
    def get(self) -> str | None:
        """Return the stored token, or None if there is none."""
        ...

    @abstractmethod
    def set(self, token: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class BlobStore(ABC):
    """Durable key/value storage for opaque byte payloads."""

    @abstractmethod
    async def read_blob(self, key: str) -> bytes | None:
        """Return the payload stored under key, or None if absent."""
        ...

    @abstractmethod
    async def write_blob(self, key: str, payload: bytes) -> None:
        """Store payload under key, replacing any previous value."""
        ...
