"""Unit tests for the in-process stores and the composition root.

Run with: pytest tests/test_stores.py -v
"""

from asgiref.sync import async_to_sync

from cinema.composition import build_app
from cinema.stores.django_store import DjangoBlobStore
from cinema.stores.memory_store import MemoryBlobStore, MemoryCredentialStore
from tests.fakes import FakeGateway


class TestMemoryCredentialStore:
    """Tests for MemoryCredentialStore."""

    def test_set_get_clear(self):
        """A stored token can be read back and cleared."""
        store = MemoryCredentialStore()
        store.set("Bearer abc")
        assert store.get() == "Bearer abc"
        store.clear()
        assert store.get() is None

    def test_empty_token_is_ignored(self):
        """Empty tokens never overwrite a stored one."""
        store = MemoryCredentialStore(token="Bearer abc")
        store.set("")
        assert store.get() == "Bearer abc"


class TestMemoryBlobStore:
    """Tests for MemoryBlobStore."""

    def test_write_replaces_previous_payload(self):
        """Writing a key twice keeps the last payload."""
        store = MemoryBlobStore()

        async def scenario():
            await store.write_blob("k", b"one")
            await store.write_blob("k", b"two")
            return await store.read_blob("k")

        assert async_to_sync(scenario)() == b"two"


class TestBuildApp:
    """Tests for the composition root."""

    def test_components_share_one_credential_store(self):
        """Hub and app expose the same credential store instance."""
        credentials = MemoryCredentialStore()
        app = build_app(FakeGateway(), MemoryBlobStore(), credentials)
        assert app.credentials is credentials
        assert app.hub._credentials is credentials

    def test_defaults_to_database_ledger(self):
        """Without a blob store the ledger uses the database."""
        app = build_app(FakeGateway())
        assert isinstance(app.ledger._store, DjangoBlobStore)
        assert isinstance(app.credentials, MemoryCredentialStore)
