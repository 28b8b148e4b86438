"""Poster cache with request coalescing.

At most one fetch per image id is in flight at any time: callers arriving
while a fetch is outstanding await the same task. Failed fetches are not
cached, so the next call retries.
"""

import asyncio
import io
import logging

from PIL import Image, UnidentifiedImageError

from cinema.domain.errors import ImageDecodeError
from cinema.stores.interfaces import RemoteGateway

logger = logging.getLogger(__name__)


def decode_image(image_id: str, data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded image.

    Raises:
        ImageDecodeError: If the bytes are not a supported image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(image_id) from exc
    return image


class ImageCache:
    """Decoded images keyed by media id. Grows without bound."""

    def __init__(self, gateway: RemoteGateway) -> None:
        self._gateway = gateway
        self._images: dict[str, Image.Image] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    def __contains__(self, image_id: str) -> bool:
        return image_id in self._images

    def __len__(self) -> int:
        return len(self._images)

    def get(self, image_id: str) -> Image.Image | None:
        """Return a cached image without fetching."""
        return self._images.get(image_id)

    async def fetch(self, image_id: str) -> Image.Image | None:
        """Return the image for image_id, fetching it at most once concurrently."""
        image = self._images.get(image_id)
        if image is not None:
            logger.debug("Image cache hit for %s", image_id)
            return image
        task = self._in_flight.get(image_id)
        if task is None:
            logger.debug("Image cache miss for %s", image_id)
            task = asyncio.ensure_future(self._load(image_id))
            self._in_flight[image_id] = task
        return await asyncio.shield(task)

    async def _load(self, image_id: str) -> Image.Image | None:
        try:
            data = await self._gateway.fetch_image(image_id)
            image = decode_image(image_id, data)
        except Exception:
            logger.warning("Could not load image %s", image_id, exc_info=True)
            return None
        else:
            self._images[image_id] = image
            return image
        finally:
            del self._in_flight[image_id]
