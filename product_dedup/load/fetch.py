"""Fetch product images from URLs, data URIs and local files."""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from pathlib import Path
from typing import Callable
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from requests import Session

from ..errors import LoadError, LoadTimeout

logger = logging.getLogger(__name__)

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
_CACHE_BUST_PARAM = "_t"

_CHUNK_SIZE = 64 * 1024

_local = threading.local()

Clock = Callable[[], float]


def _get_session() -> Session:
    """Return this thread's requests session configured with image headers.

    Sessions are not shared between threads, so a parallel scan gets one
    connection pool per worker.
    """
    session: Session | None = getattr(_local, "session", None)
    if session is None:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": _USER_AGENT,
                "Accept": "image/avif,image/webp,image/*,*/*;q=0.8",
            }
        )
        _local.session = session
    return session


def cache_busted(url: str, clock: Clock = time.time) -> str:
    """Return *url* with a timestamp query parameter appended."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{_CACHE_BUST_PARAM}={int(clock() * 1000)}"


def decode_data_uri(uri: str) -> bytes:
    """Return the payload of a ``data:`` URI."""
    try:
        header, data = uri.split(",", 1)
    except ValueError as exc:
        raise LoadError(uri, "malformed data URI") from exc
    if ";base64" in header:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise LoadError(uri, "invalid base64 payload") from exc
    return unquote_to_bytes(data)


def fetch_image_bytes(
    url: str,
    timeout: float,
    session: Session | None = None,
    cache_bust: bool = True,
    clock: Clock = time.time,
    timer: Clock = time.monotonic,
) -> bytes:
    """Return the raw bytes behind an image reference.

    HTTP(S) URLs are downloaded, ``data:`` URIs are decoded inline and
    anything else is read from the local filesystem. A download that has not
    finished *timeout* seconds after it started raises :class:`LoadTimeout`;
    every other failure raises :class:`LoadError`.
    """
    reference = (url or "").strip()
    if not reference:
        raise LoadError(url, "empty image reference")
    if reference.startswith("data:"):
        return decode_data_uri(reference)

    try:
        parsed = urlparse(reference)
    except ValueError as exc:
        raise LoadError(reference, "malformed image reference") from exc
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https"):
        return _fetch_http(
            reference, timeout, session or _get_session(), cache_bust, clock, timer
        )
    if scheme == "file":
        return _read_file(Path(url2pathname(parsed.path)), reference)
    if scheme and len(scheme) > 1:
        raise LoadError(reference, f"unsupported scheme '{scheme}'")
    return _read_file(Path(reference), reference)


def _fetch_http(
    url: str,
    timeout: float,
    session: Session,
    cache_bust: bool,
    clock: Clock,
    timer: Clock,
) -> bytes:
    target_url = cache_busted(url, clock) if cache_bust else url
    deadline = timer() + timeout
    try:
        response = session.get(target_url, timeout=timeout, allow_redirects=True, stream=True)
    except requests.Timeout as exc:
        raise LoadTimeout(url, timeout) from exc
    except requests.RequestException as exc:
        raise LoadError(url, str(exc)) from exc

    try:
        if response.status_code >= 400:
            raise LoadError(url, f"server returned status {response.status_code}")
        chunks: list[bytes] = []
        for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
            if timer() > deadline:
                raise LoadTimeout(url, timeout)
            chunks.append(chunk)
    except requests.Timeout as exc:
        raise LoadTimeout(url, timeout) from exc
    except requests.RequestException as exc:
        raise LoadError(url, str(exc)) from exc
    finally:
        response.close()

    content = b"".join(chunks)
    logger.debug("Fetched %d bytes from %s", len(content), url)
    return content


def _read_file(path: Path, reference: str) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise LoadError(reference, exc.strerror or str(exc)) from exc
    except ValueError as exc:
        raise LoadError(reference, f"malformed file path ({exc})") from exc
