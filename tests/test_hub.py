"""Unit tests for StateHub.

These test fan-out, cache replacement and the error policy against an
in-memory gateway.
Run with: pytest tests/test_hub.py -v
"""

import asyncio

import pytest
from asgiref.sync import async_to_sync

from cinema.domain import AuthResult, Credentials
from cinema.services.hub import (
    AuthMode,
    AuthOptions,
    BootstrapOptions,
    FilmDetailOptions,
    StateHub,
)
from cinema.services.seat_selection import SeatSelection
from cinema.stores.memory_store import MemoryCredentialStore
from tests.fakes import (
    make_film,
    make_hall,
    make_plan,
    make_review,
    make_session,
)


class TestBootstrap:
    """Tests for StateHub.bootstrap."""

    def test_loads_films_without_profile(self, hub, gateway):
        """Two films and no profile request report (True, 2, "ok")."""
        gateway.films = [make_film("f1"), make_film("f2", title="Dune")]
        reported = []

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=True, load_profile=False), reported.append
        )

        assert len(hub.films) == 2
        assert hub.profile is None
        assert gateway.calls["get_profile"] == 0
        assert (result.all_succeeded, result.items_loaded, result.status) == (True, 2, "ok")
        assert reported == [result]
        assert hub.busy is False

    def test_profile_failure_does_not_block_films(self, hub, gateway):
        """A failing profile fetch still lets films load."""
        gateway.films = [make_film("f1")]
        gateway.fail.add("get_profile")

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=True, load_profile=True)
        )

        assert len(hub.films) == 1
        assert hub.profile is None
        assert result.all_succeeded is False
        assert result.status == "err"
        assert result.items_loaded == 1
        assert "get profile" in hub.last_error

    def test_loads_profile(self, hub, gateway):
        """A loaded profile counts as one item."""
        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=False, load_profile=True)
        )
        assert hub.profile.email == "anna@example.com"
        assert result.items_loaded == 1

    def test_missing_token_degrades_to_no_profile(self, gateway):
        """Without a token the profile fetch fails at call time."""
        hub = StateHub(gateway, MemoryCredentialStore())

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=False, load_profile=True)
        )

        assert gateway.calls["get_profile"] == 1
        assert hub.profile is None
        assert result.all_succeeded is False

    def test_preload_fans_out_by_distinct_hall(self, hub, gateway):
        """Sessions in halls {A, A, B, C} trigger exactly three hall fetches."""
        gateway.sessions["f1"] = [
            make_session("s1", "A"),
            make_session("s2", "A"),
            make_session("s3", "B"),
            make_session("s4", "C"),
        ]
        gateway.halls = {hid: make_hall(hid) for hid in "ABC"}

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=False, preload_halls=True, film_id="f1")
        )

        assert gateway.calls["get_hall"] == 3
        assert sorted(gateway.hall_requests) == ["A", "B", "C"]
        assert set(hub.halls_by_id) == {"A", "B", "C"}
        assert len(hub.sessions_for("f1")) == 4
        assert result.items_loaded == 4

    def test_hall_merge_is_independent_of_completion_order(self, hub, gateway):
        """A failing hall fetch does not stop the others from merging."""
        gateway.sessions["f1"] = [make_session("s1", "A"), make_session("s2", "B")]
        gateway.halls = {"A": make_hall("A")}  # B is missing remotely

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=False, preload_halls=True, film_id="f1")
        )

        assert set(hub.halls_by_id) == {"A"}
        assert result.all_succeeded is True

    def test_sessions_failure_does_not_fail_bootstrap(self, hub, gateway):
        """Only films and profile decide the aggregate result."""
        gateway.films = [make_film("f1")]
        gateway.fail.add("list_sessions")

        result = async_to_sync(hub.bootstrap)(
            BootstrapOptions(load_films=True, preload_halls=True, film_id="f1")
        )

        assert hub.sessions_for("f1") == ()
        assert gateway.calls["get_hall"] == 0
        assert (result.all_succeeded, result.items_loaded, result.status) == (True, 1, "ok")
        assert "list sessions" in hub.last_error

    def test_preload_without_film_id_skips_sessions(self, hub, gateway):
        """preload_halls needs a film id."""
        async_to_sync(hub.bootstrap)(BootstrapOptions(load_films=False, preload_halls=True))
        assert gateway.calls["list_sessions"] == 0

    def test_date_filter_is_passed_to_sessions(self, hub, gateway):
        """The date option narrows the session query."""
        gateway.sessions["f1"] = [
            make_session("s1", "A", start_at="2025-10-21T18:00:00Z"),
            make_session("s2", "A", start_at="2025-10-22T18:00:00Z"),
        ]
        gateway.halls = {"A": make_hall("A")}

        async_to_sync(hub.bootstrap)(
            BootstrapOptions(
                load_films=False, preload_halls=True, film_id="f1", date="2025-10-22"
            )
        )

        assert gateway.last_session_query["date"] == "2025-10-22"
        assert [s.id for s in hub.sessions_for("f1")] == ["s2"]

    def test_busy_while_running(self, hub, gateway):
        """busy is set for the duration of the bootstrap."""
        gateway.delay["list_films"] = 0.01
        seen = []

        async def scenario():
            task = asyncio.ensure_future(hub.bootstrap())
            await asyncio.sleep(0)
            seen.append(hub.busy)
            await task
            seen.append(hub.busy)

        async_to_sync(scenario)()
        assert seen == [True, False]


class TestFilmDetail:
    """Tests for StateHub.load_film_detail."""

    def test_sorts_sessions_by_start(self, hub, gateway):
        """sort_sessions orders sessions by start time."""
        gateway.sessions["film-1"] = [
            make_session("late", "A", start_at="2025-10-21T21:00:00Z"),
            make_session("early", "A", start_at="2025-10-21T09:00:00Z"),
        ]
        gateway.halls = {"A": make_hall("A")}

        ok = async_to_sync(hub.load_film_detail)(make_film(), FilmDetailOptions())

        assert ok is True
        assert [s.id for s in hub.sessions_for("film-1")] == ["early", "late"]
        assert gateway.last_session_query["size"] == 120

    def test_refetch_replaces_sessions(self, hub, gateway):
        """A second fetch leaves exactly the second response cached."""
        film = make_film()
        gateway.sessions["film-1"] = [make_session("s1", "A"), make_session("s2", "A")]
        options = FilmDetailOptions(include_reviews=False, include_halls=False)
        async_to_sync(hub.load_film_detail)(film, options)

        gateway.sessions["film-1"] = [make_session("s3", "B")]
        async_to_sync(hub.load_film_detail)(film, options)

        assert [s.id for s in hub.sessions_for("film-1")] == ["s3"]

    def test_reviews_are_capped_and_replaced(self, hub, gateway):
        """max_reviews limits the fetch and the cached list is replaced."""
        gateway.reviews["film-1"] = [make_review(f"r{i}") for i in range(5)]
        options = FilmDetailOptions(include_sessions=False, include_halls=False, max_reviews=3)

        async_to_sync(hub.load_film_detail)(make_film(), options)

        assert [r.id for r in hub.reviews_for("film-1")] == ["r0", "r1", "r2"]

    def test_halls_only_uses_cached_sessions(self, hub, gateway):
        """Halls can be refreshed from already cached sessions."""
        gateway.sessions["film-1"] = [make_session("s1", "A")]
        gateway.halls = {"A": make_hall("A")}
        async_to_sync(hub.load_film_detail)(
            make_film(), FilmDetailOptions(include_reviews=False, include_halls=False)
        )

        async_to_sync(hub.load_film_detail)(
            make_film(), FilmDetailOptions(include_sessions=False, include_reviews=False)
        )

        assert gateway.calls["list_sessions"] == 1
        assert hub.hall("A") is not None

    def test_failed_fetch_keeps_previous_data(self, hub, gateway):
        """A failed refetch reports False and keeps the cache."""
        gateway.sessions["film-1"] = [make_session("s1", "A")]
        options = FilmDetailOptions(include_reviews=False, include_halls=False)
        async_to_sync(hub.load_film_detail)(make_film(), options)

        gateway.fail.add("list_sessions")
        ok = async_to_sync(hub.load_film_detail)(make_film(), options)

        assert ok is False
        assert [s.id for s in hub.sessions_for("film-1")] == ["s1"]


class TestReviews:
    """Tests for review submission and derived ratings."""

    def test_submitted_review_is_prepended(self, hub, gateway):
        """A new review goes to the front of the cached list."""
        gateway.reviews["film-1"] = [make_review("r1", rating=3)]
        async_to_sync(hub.load_film_detail)(
            make_film(), FilmDetailOptions(include_sessions=False, include_halls=False)
        )

        review = async_to_sync(hub.submit_review)("film-1", 5, "Loved it")

        assert hub.reviews_for("film-1")[0] == review
        assert [r.id for r in hub.reviews_for("film-1")][1:] == ["r1"]
        assert hub.average_rating("film-1") == 4.0

    def test_failed_submission_returns_none(self, hub, gateway):
        """Gateway errors are swallowed."""
        gateway.fail.add("add_review")
        assert async_to_sync(hub.submit_review)("film-1", 5, "x") is None
        assert hub.reviews_for("film-1") == ()

    def test_average_rating_without_reviews(self, hub):
        """No cached reviews give a zero average."""
        assert hub.average_rating("unknown") == 0.0


class TestAuthenticate:
    """Tests for StateHub.authenticate."""

    def test_blocking_login_stores_bearer_token(self, gateway):
        """A successful login stores the token with a Bearer prefix."""
        credentials = MemoryCredentialStore()
        hub = StateHub(gateway, credentials)
        reported = []

        outcome = async_to_sync(hub.authenticate)(
            Credentials(email="a@b.c", password="pw"),
            AuthMode.LOGIN,
            AuthOptions(blocking=True, remember_me=True),
            reported.append,
        )

        assert outcome.ok is True
        assert outcome.status == "ok"
        assert credentials.get() == "Bearer secret"
        assert reported == [outcome]
        assert hub.busy is False

    def test_register_calls_register(self, hub, gateway):
        """Register mode uses the register endpoint."""
        async_to_sync(hub.authenticate)(
            Credentials(email="a@b.c", password="pw", first_name="A"),
            AuthMode.REGISTER,
            AuthOptions(blocking=True),
        )
        assert gateway.calls["register"] == 1
        assert gateway.calls["login"] == 0

    def test_rejected_credentials_surface_in_outcome(self, gateway):
        """A rejected login is reported, not raised."""
        gateway.auth_result = AuthResult(token="", ok=False, message="Bad password")
        hub = StateHub(gateway, MemoryCredentialStore())

        outcome = async_to_sync(hub.authenticate)(
            Credentials(email="a@b.c", password="bad"), options=AuthOptions(blocking=True)
        )

        assert outcome.ok is False
        assert outcome.message == "Bad password"

    def test_transport_failure_surfaces_in_outcome(self, hub, gateway):
        """Gateway exceptions become a failed outcome."""
        gateway.fail.add("login")
        outcome = async_to_sync(hub.authenticate)(
            Credentials(email="a@b.c", password="pw"), options=AuthOptions(blocking=True)
        )
        assert outcome.ok is False
        assert outcome.status == "err"

    def test_remember_me_requires_a_stored_token(self, gateway):
        """Success without any token is a failure when remember_me is set."""
        gateway.auth_result = AuthResult(token="", ok=True)
        hub = StateHub(gateway, MemoryCredentialStore())

        outcome = async_to_sync(hub.authenticate)(
            Credentials(email="a@b.c", password="pw"),
            options=AuthOptions(blocking=True, remember_me=True),
        )

        assert outcome.status == "token-missing"

    def test_blocking_wait_times_out(self, gateway):
        """The blocking wait gives up after the timeout; the call still completes."""
        gateway.delay["login"] = 0.2
        credentials = MemoryCredentialStore()
        hub = StateHub(gateway, credentials, auth_timeout=0.05)

        async def scenario():
            outcome = await hub.authenticate(
                Credentials(email="a@b.c", password="pw"),
                options=AuthOptions(blocking=True),
            )
            token_after_timeout = credentials.get()
            await asyncio.sleep(0.3)
            return outcome, token_after_timeout

        outcome, token_after_timeout = async_to_sync(scenario)()
        assert outcome.status == "timeout"
        assert token_after_timeout is None
        assert credentials.get() == "Bearer secret"

    def test_non_blocking_returns_task_and_reports_later(self, gateway):
        """Non-blocking mode returns at once and reports through the callback."""
        gateway.delay["login"] = 0.01
        hub = StateHub(gateway, MemoryCredentialStore())
        reported = []

        async def scenario():
            task = await hub.authenticate(
                Credentials(email="a@b.c", password="pw"), on_complete=reported.append
            )
            busy_while_running = hub.busy
            outcome = await task
            return busy_while_running, outcome

        busy_while_running, outcome = async_to_sync(scenario)()
        assert busy_while_running is True
        assert reported == [outcome]
        assert outcome.ok is True
        assert hub.busy is False


    def test_failing_callback_does_not_fail_the_task(self, gateway):
        """An exception in on_complete is logged; the task still yields the outcome."""
        hub = StateHub(gateway, MemoryCredentialStore())

        def explode(outcome):
            raise RuntimeError("listener broke")

        async def scenario():
            task = await hub.authenticate(
                Credentials(email="a@b.c", password="pw"), on_complete=explode
            )
            return await task

        outcome = async_to_sync(scenario)()
        assert outcome.ok is True
        assert hub.busy is False

class TestProfileAndMisc:
    """Tests for profile updates, sign-out, search and seat selection."""

    def test_update_profile_replaces_snapshot(self, hub):
        """The server's response replaces the cached profile."""
        profile = async_to_sync(hub.update_profile)({"first_name": "Olga"})
        assert hub.profile == profile
        assert hub.profile.first_name == "Olga"

    def test_sign_out_clears_token_and_profile(self, hub, credentials):
        """sign_out forgets both the token and the profile."""
        async_to_sync(hub.bootstrap)(BootstrapOptions(load_films=False, load_profile=True))
        hub.sign_out()
        assert credentials.get() is None
        assert hub.profile is None

    def test_search_films_is_case_insensitive(self, hub, gateway):
        """Search matches title substrings regardless of case."""
        gateway.films = [make_film("f1", title="Arrival"), make_film("f2", title="Dune")]
        async_to_sync(hub.bootstrap)()
        assert [f.id for f in hub.search_films("  dUn ")] == ["f2"]
        assert len(hub.search_films("")) == 2

    def test_load_film_replaces_cached_film(self, hub, gateway):
        """A refetched film replaces the cached one with the same id."""
        gateway.films = [make_film("f1", title="Old")]
        async_to_sync(hub.bootstrap)()
        gateway.films = [make_film("f1", title="New")]

        async_to_sync(hub.load_film)("f1")

        assert [f.title for f in hub.films] == ["New"]

    def test_load_seat_categories(self, hub):
        """Seat categories are cached on the hub."""
        categories = async_to_sync(hub.load_seat_categories)()
        assert [c.name for c in categories] == ["Standard", "VIP"]

    def test_open_seat_selection_starts_empty(self, hub, gateway):
        """A fetched plan yields a fresh, uncached selection."""
        gateway.hall_plans["A"] = make_plan("A")

        selection = async_to_sync(hub.open_seat_selection)(make_session("s1", "A"))

        assert isinstance(selection, SeatSelection)
        assert selection.count == 0
        assert len(hub.halls_by_id) == 0

    def test_open_seat_selection_failure_returns_none(self, hub):
        """A missing plan gives no selection."""
        assert async_to_sync(hub.open_seat_selection)(make_session("s1", "Z")) is None

    def test_cached_maps_are_read_only(self, hub):
        """Callers cannot write into the hub's maps."""
        with pytest.raises(TypeError):
            hub.halls_by_id["x"] = make_hall("x")
        assert "x" not in hub.halls_by_id
