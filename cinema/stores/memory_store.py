"""In-process implementations of the credential and blob stores."""

import logging

from cinema.stores.interfaces import BlobStore, CredentialStore

logger = logging.getLogger(__name__)


class MemoryCredentialStore(CredentialStore):
    """Token holder that lives as long as the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        if not token:
            logger.warning("Refusing to store an empty token")
            return
        self._token = token

    def clear(self) -> None:
        self._token = None


class MemoryBlobStore(BlobStore):
    """Blob store backed by a dict; contents survive as long as the instance."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    async def read_blob(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    async def write_blob(self, key: str, payload: bytes) -> None:
        self._blobs[key] = bytes(payload)
