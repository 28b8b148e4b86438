"""Django ORM implementation of the BlobStore.

ORM access is synchronous, so each call is handed to ``sync_to_async``.
"""

from asgiref.sync import sync_to_async

from cinema.models import StoredBlob
from cinema.stores.interfaces import BlobStore


class DjangoBlobStore(BlobStore):
    """Database-backed blob store using the Django ORM."""

    async def read_blob(self, key: str) -> bytes | None:
        return await sync_to_async(self._read)(key)

    async def write_blob(self, key: str, payload: bytes) -> None:
        await sync_to_async(self._write)(key, payload)

    @staticmethod
    def _read(key: str) -> bytes | None:
        blob = StoredBlob.objects.filter(key=key).first()
        if blob is None:
            return None
        return bytes(blob.payload)

    @staticmethod
    def _write(key: str, payload: bytes) -> None:
        StoredBlob.objects.update_or_create(key=key, defaults={"payload": payload})
