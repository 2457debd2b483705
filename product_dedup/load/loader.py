"""Image loader used by the duplicate detector."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from PIL import Image
from requests import Session

from .decode import to_rgba
from .fetch import Clock, fetch_image_bytes

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class Loader(Protocol):
    """Anything that turns an image reference into a decoded RGBA image."""

    def load(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> Image.Image:
        ...


class ImageLoader:
    """Fetch and decode images by reference.

    Each call performs exactly one fetch; there are no retries. Failures raise
    :class:`~product_dedup.errors.LoadError` or its subclass
    :class:`~product_dedup.errors.LoadTimeout`. Without an explicit *session*
    each thread downloads through its own session; an explicit one is shared
    by every thread that calls :meth:`load`.
    """

    def __init__(
        self,
        session: Session | None = None,
        cache_bust: bool = True,
        clock: Clock = time.time,
        timer: Clock = time.monotonic,
    ) -> None:
        self._session = session
        self._cache_bust = cache_bust
        self._clock = clock
        self._timer = timer

    def load(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> Image.Image:
        payload = fetch_image_bytes(
            url,
            timeout,
            session=self._session,
            cache_bust=self._cache_bust,
            clock=self._clock,
            timer=self._timer,
        )
        image = to_rgba(payload, url)
        logger.debug("Decoded %dx%d image", image.width, image.height)
        return image
