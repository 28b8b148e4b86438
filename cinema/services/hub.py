"""State hub - owns the cached application state and all remote reads.

The hub:
- Depends only on interfaces (gateway, credential store)
- Fans out concurrent reads and merges their results from one coordinating
  coroutine, so each map is written by one task at a time
- Swallows gateway failures at its boundary: callers see missing data, and
  the failure is logged and kept in ``last_error``
- Reports authentication failures through the returned outcome, never by
  raising
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeVar

from cinema.conf import cinema_setting
from cinema.domain import (
    Credentials,
    Film,
    Hall,
    Review,
    SeatCategory,
    Session,
    UserProfile,
)
from cinema.services.seat_selection import SeatSelection
from cinema.stores.interfaces import CredentialStore, RemoteGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class BootstrapOptions:
    """What ``StateHub.bootstrap`` should load.

    Halls are only preloaded when ``film_id`` is given; ``date`` (YYYY-MM-DD)
    filters that film's sessions and ``delay`` (seconds) is waited before
    reporting.
    """

    load_films: bool = True
    load_profile: bool = False
    preload_halls: bool = False
    film_id: str | None = None
    date: str | None = None
    delay: float = 0.0


@dataclass(frozen=True)
class BootstrapResult:
    """Outcome reported by ``StateHub.bootstrap``."""

    all_succeeded: bool
    items_loaded: int
    status: str


@dataclass(frozen=True)
class FilmDetailOptions:
    """Which parts of a film detail ``StateHub.load_film_detail`` refreshes."""

    include_sessions: bool = True
    include_reviews: bool = True
    include_halls: bool = True
    max_reviews: int = 100
    sort_sessions: bool = True
    date: str | None = None


class AuthMode(Enum):
    """Whether ``StateHub.authenticate`` logs in or registers."""

    LOGIN = "login"
    REGISTER = "register"


@dataclass(frozen=True)
class AuthOptions:
    """``blocking`` waits for the outcome (bounded by the auth timeout)."""

    blocking: bool = False
    remember_me: bool = True


@dataclass(frozen=True)
class AuthOutcome:
    """Result of an authentication attempt; ``status`` names the failure."""

    ok: bool
    status: str
    message: str | None = None


def bearer(token: str) -> str:
    """Prefix token for use as an Authorization header value."""
    return token if token.startswith(BEARER_PREFIX) else f"{BEARER_PREFIX}{token}"


class StateHub:
    """Cached films, sessions, halls, reviews and profile."""

    def __init__(
        self,
        gateway: RemoteGateway,
        credentials: CredentialStore,
        auth_timeout: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._credentials = credentials
        if auth_timeout is None:
            auth_timeout = cinema_setting("AUTH_TIMEOUT_SECONDS")
        self._auth_timeout = auth_timeout
        self._films: tuple[Film, ...] = ()
        self._sessions_by_film: dict[str, tuple[Session, ...]] = {}
        self._halls_by_id: dict[str, Hall] = {}
        self._reviews_by_film: dict[str, tuple[Review, ...]] = {}
        self._seat_categories: tuple[SeatCategory, ...] = ()
        self.profile: UserProfile | None = None
        self.last_error: str | None = None
        self._busy = 0
        self._background: set[asyncio.Task] = set()

    # Read-only views

    @property
    def busy(self) -> bool:
        return self._busy > 0

    @property
    def films(self) -> tuple[Film, ...]:
        return self._films

    @property
    def sessions_by_film(self) -> Mapping[str, tuple[Session, ...]]:
        return MappingProxyType(self._sessions_by_film)

    @property
    def halls_by_id(self) -> Mapping[str, Hall]:
        return MappingProxyType(self._halls_by_id)

    @property
    def reviews_by_film(self) -> Mapping[str, tuple[Review, ...]]:
        return MappingProxyType(self._reviews_by_film)

    @property
    def seat_categories(self) -> tuple[SeatCategory, ...]:
        return self._seat_categories

    def sessions_for(self, film_id: str) -> tuple[Session, ...]:
        return self._sessions_by_film.get(film_id, ())

    def hall(self, hall_id: str) -> Hall | None:
        return self._halls_by_id.get(hall_id)

    def reviews_for(self, film_id: str) -> tuple[Review, ...]:
        return self._reviews_by_film.get(film_id, ())

    def average_rating(self, film_id: str) -> float:
        """Mean rating of the cached reviews, 0.0 when there are none."""
        reviews = self.reviews_for(film_id)
        if not reviews:
            return 0.0
        return sum(review.rating for review in reviews) / len(reviews)

    def search_films(self, text: str) -> list[Film]:
        query = text.strip().casefold()
        if not query:
            return list(self._films)
        return [film for film in self._films if query in film.title.casefold()]

    # Loading

    async def bootstrap(
        self,
        options: BootstrapOptions | None = None,
        on_done: Callable[[BootstrapResult], Any] | None = None,
    ) -> BootstrapResult:
        """Load the requested kinds of data concurrently.

        Each kind fails on its own: a failed profile fetch does not stop the
        films from loading.
        """
        options = options or BootstrapOptions()
        with self._busy_scope():
            jobs: dict[str, Awaitable[Any]] = {}
            if options.load_films:
                jobs["films"] = self._attempt(
                    "list films",
                    self._gateway.list_films(0, cinema_setting("FILMS_PAGE_SIZE")),
                )
            if options.load_profile:
                jobs["profile"] = self._attempt(
                    "get profile", self._gateway.get_profile(self._credentials.get())
                )
            if options.preload_halls and options.film_id:
                jobs["sessions"] = self._refresh_sessions(
                    options.film_id,
                    size=cinema_setting("BOOTSTRAP_SESSIONS_PAGE_SIZE"),
                    date=options.date,
                    sort=False,
                    with_halls=True,
                )
            results = dict(zip(jobs, await asyncio.gather(*jobs.values())))

            loaded = 0
            if results.get("films") is not None:
                self._films = tuple(results["films"])
                loaded += len(self._films)
            if results.get("profile") is not None:
                self.profile = results["profile"]
                loaded += 1
            if results.get("sessions") is not None:
                loaded += len(results["sessions"])
            if options.delay > 0:
                await asyncio.sleep(options.delay)

        # A failed sessions fetch leaves them absent without failing the bootstrap.
        ok = all(
            results[kind] is not None for kind in ("films", "profile") if kind in results
        )
        result = BootstrapResult(
            all_succeeded=ok, items_loaded=loaded, status="ok" if ok else "err"
        )
        logger.debug("Bootstrap finished: %s", result)
        if on_done is not None:
            on_done(result)
        return result

    async def load_film_detail(
        self, film: Film, options: FilmDetailOptions | None = None
    ) -> bool:
        """Refresh a film's sessions, halls and reviews.

        Returns False if any requested fetch failed.
        """
        options = options or FilmDetailOptions()
        with self._busy_scope():
            jobs: list[Awaitable[Any]] = []
            if options.include_sessions:
                jobs.append(
                    self._refresh_sessions(
                        film.id,
                        size=cinema_setting("DETAIL_SESSIONS_PAGE_SIZE"),
                        date=options.date,
                        sort=options.sort_sessions,
                        with_halls=options.include_halls,
                    )
                )
            elif options.include_halls:
                jobs.append(self._preload_halls(self.sessions_for(film.id)))
            if options.include_reviews:
                jobs.append(self._refresh_reviews(film.id, options.max_reviews))
            results = await asyncio.gather(*jobs)
        return all(result is not None for result in results)

    async def load_film(self, film_id: str) -> Film | None:
        """Fetch one film and replace any cached film with the same id."""
        with self._busy_scope():
            film = await self._attempt(
                f"get film {film_id}", self._gateway.get_film(film_id)
            )
            if film is None:
                return None
            if film in self._films:
                self._films = tuple(film if f == film else f for f in self._films)
            else:
                self._films = (*self._films, film)
            return film

    async def load_seat_categories(self, size: int = 20) -> tuple[SeatCategory, ...]:
        """Refresh the seat categories, keeping the old ones on failure."""
        with self._busy_scope():
            categories = await self._attempt(
                "list seat categories",
                self._gateway.list_seat_categories(0, size, self._credentials.get()),
            )
            if categories is not None:
                self._seat_categories = tuple(categories)
            return self._seat_categories

    async def open_seat_selection(self, session: Session) -> SeatSelection | None:
        """Fetch the session's hall plan and start an empty selection on it.

        The plan belongs to the returned selection only; it is not cached.
        """
        with self._busy_scope():
            plan = await self._attempt(
                f"get hall plan {session.hall_id}",
                self._gateway.get_hall_plan(session.hall_id, self._credentials.get()),
            )
        if plan is None:
            return None
        return SeatSelection(plan)

    # Writes

    async def submit_review(self, film_id: str, rating: int, text: str) -> Review | None:
        """Post a review and put it at the front of the film's cached list."""
        with self._busy_scope():
            review = await self._attempt(
                f"add review for film {film_id}",
                self._gateway.add_review(film_id, rating, text, self._credentials.get()),
            )
            if review is not None:
                self._reviews_by_film[film_id] = (review, *self.reviews_for(film_id))
            return review

    async def update_profile(self, fields: dict[str, Any]) -> UserProfile | None:
        """Send profile changes and keep the returned profile."""
        with self._busy_scope():
            profile = await self._attempt(
                "update profile",
                self._gateway.update_profile(fields, self._credentials.get()),
            )
            if profile is not None:
                self.profile = profile
            return profile

    def sign_out(self) -> None:
        """Forget the stored token and the cached profile."""
        self._credentials.clear()
        self.profile = None
        logger.info("Signed out")

    # Authentication

    async def authenticate(
        self,
        credentials: Credentials,
        mode: AuthMode = AuthMode.LOGIN,
        options: AuthOptions | None = None,
        on_complete: Callable[[AuthOutcome], Any] | None = None,
    ) -> AuthOutcome | asyncio.Task:
        """Log in or register.

        Blocking mode waits for the outcome for at most the auth timeout and
        returns it; the call itself keeps running if the wait times out.
        Otherwise the call is scheduled and its task returned at once, with
        the outcome delivered to ``on_complete``.
        """
        options = options or AuthOptions()
        if not options.blocking:
            self._busy += 1
            task = asyncio.ensure_future(
                self._authenticate_in_background(credentials, mode, options, on_complete)
            )
            self._keep(task)
            return task

        with self._busy_scope():
            task = asyncio.ensure_future(self._authenticate(credentials, mode, options))
            self._keep(task)
            try:
                outcome = await asyncio.wait_for(
                    asyncio.shield(task), timeout=self._auth_timeout
                )
            except asyncio.TimeoutError:
                logger.warning("%s timed out after %ss", mode.value, self._auth_timeout)
                outcome = AuthOutcome(ok=False, status="timeout")
        if on_complete is not None:
            on_complete(outcome)
        return outcome

    async def _authenticate_in_background(
        self,
        credentials: Credentials,
        mode: AuthMode,
        options: AuthOptions,
        on_complete: Callable[[AuthOutcome], Any] | None,
    ) -> AuthOutcome:
        try:
            outcome = await self._authenticate(credentials, mode, options)
        finally:
            self._busy -= 1
        if on_complete is not None:
            try:
                on_complete(outcome)
            except Exception:
                logger.warning("%s completion callback failed", mode.value, exc_info=True)
        return outcome

    async def _authenticate(
        self, credentials: Credentials, mode: AuthMode, options: AuthOptions
    ) -> AuthOutcome:
        try:
            if mode is AuthMode.REGISTER:
                result = await self._gateway.register(credentials)
            else:
                result = await self._gateway.login(
                    credentials.email, credentials.password
                )
        except Exception as exc:
            logger.warning("%s failed", mode.value, exc_info=True)
            self.last_error = str(exc)
            return AuthOutcome(ok=False, status="err", message=str(exc))

        if not result.ok:
            logger.info("%s rejected: %s", mode.value, result.message)
            self.last_error = result.message
            return AuthOutcome(ok=False, status="rejected", message=result.message)
        if result.token:
            self._credentials.set(bearer(result.token))
        if options.remember_me and not self._credentials.get():
            logger.warning("%s succeeded but no token was stored", mode.value)
            return AuthOutcome(ok=False, status="token-missing", message=result.message)
        logger.info("%s succeeded", mode.value)
        return AuthOutcome(ok=True, status="ok", message=result.message)

    # Internals

    async def _refresh_sessions(
        self,
        film_id: str,
        size: int,
        date: str | None,
        sort: bool,
        with_halls: bool,
    ) -> tuple[Session, ...] | None:
        sessions = await self._attempt(
            f"list sessions for film {film_id}",
            self._gateway.list_sessions(0, size, film_id, date, self._credentials.get()),
        )
        if sessions is None:
            return None
        if sort:
            sessions = sorted(sessions, key=lambda session: session.start_at)
        self._sessions_by_film[film_id] = tuple(sessions)
        if with_halls:
            await self._preload_halls(sessions)
        return self._sessions_by_film[film_id]

    async def _refresh_reviews(
        self, film_id: str, max_reviews: int
    ) -> tuple[Review, ...] | None:
        reviews = await self._attempt(
            f"list reviews for film {film_id}",
            self._gateway.list_reviews(film_id, 0, max_reviews, self._credentials.get()),
        )
        if reviews is None:
            return None
        self._reviews_by_film[film_id] = tuple(reviews)
        return self._reviews_by_film[film_id]

    async def _preload_halls(self, sessions: Iterable[Session]) -> int:
        """Fetch each distinct hall once and merge halls as they arrive."""
        hall_ids = list(dict.fromkeys(session.hall_id for session in sessions))
        token = self._credentials.get()
        merged = 0
        for next_hall in asyncio.as_completed(
            [self._fetch_hall(hall_id, token) for hall_id in hall_ids]
        ):
            hall_id, hall = await next_hall
            if hall is not None:
                self._halls_by_id[hall_id] = hall
                merged += 1
        logger.debug("Merged %d of %d halls", merged, len(hall_ids))
        return merged

    async def _fetch_hall(self, hall_id: str, token: str | None) -> tuple[str, Hall | None]:
        hall = await self._attempt(
            f"get hall {hall_id}", self._gateway.get_hall(hall_id, token)
        )
        return hall_id, hall

    async def _attempt(self, what: str, call: Awaitable[T]) -> T | None:
        try:
            return await call
        except Exception as exc:
            logger.warning("%s failed", what, exc_info=True)
            self.last_error = f"{what}: {exc}"
            return None

    @contextmanager
    def _busy_scope(self):
        self._busy += 1
        try:
            yield
        finally:
            self._busy -= 1

    def _keep(self, task: asyncio.Task) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)
