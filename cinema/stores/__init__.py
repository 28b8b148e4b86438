from cinema.stores.interfaces import BlobStore, CredentialStore, RemoteGateway
from cinema.stores.memory_store import MemoryBlobStore, MemoryCredentialStore

__all__ = [
    "BlobStore",
    "CredentialStore",
    "RemoteGateway",
    "MemoryBlobStore",
    "MemoryCredentialStore",
]
