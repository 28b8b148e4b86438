"""Pytest configuration and shared fixtures."""

import pytest

from cinema.services.hub import StateHub
from cinema.stores.memory_store import MemoryBlobStore, MemoryCredentialStore
from tests.fakes import FakeGateway


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def credentials() -> MemoryCredentialStore:
    return MemoryCredentialStore(token="Bearer secret")


@pytest.fixture
def hub(gateway: FakeGateway, credentials: MemoryCredentialStore) -> StateHub:
    return StateHub(gateway, credentials)


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()
