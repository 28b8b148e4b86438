"""Composition root.

Builds one instance of each stateful component and hands them out together.
Callers pass the resulting ``CinemaApp`` to whatever needs it; nothing here
is a module-level singleton.
"""

from dataclasses import dataclass

from cinema.services.hub import StateHub
from cinema.services.image_cache import ImageCache
from cinema.services.ledger import Checkout, TicketLedger
from cinema.stores.django_store import DjangoBlobStore
from cinema.stores.interfaces import BlobStore, CredentialStore, RemoteGateway
from cinema.stores.memory_store import MemoryCredentialStore


@dataclass(frozen=True)
class CinemaApp:
    hub: StateHub
    images: ImageCache
    ledger: TicketLedger
    checkout: Checkout
    credentials: CredentialStore


def build_app(
    gateway: RemoteGateway,
    blob_store: BlobStore | None = None,
    credentials: CredentialStore | None = None,
) -> CinemaApp:
    """Wire the core around a gateway.

    The ledger defaults to the Django database and the token to an
    in-process store.
    """
    if blob_store is None:
        blob_store = DjangoBlobStore()
    if credentials is None:
        credentials = MemoryCredentialStore()
    ledger = TicketLedger(blob_store)
    return CinemaApp(
        hub=StateHub(gateway, credentials),
        images=ImageCache(gateway),
        ledger=ledger,
        checkout=Checkout(ledger),
        credentials=credentials,
    )
