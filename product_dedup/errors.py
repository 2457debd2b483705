"""Exceptions raised while comparing product images."""

from __future__ import annotations


class ComparisonError(Exception):
    """Base class for failures that degrade a comparison to zero similarity."""


class LoadError(ComparisonError):
    """Raised when an image reference cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load image {_shorten(url)}: {reason}")
        self.url = url
        self.reason = reason


class LoadTimeout(LoadError):
    """Raised when an image does not arrive within the allotted timeout."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(url, f"timed out after {timeout:g}s")
        self.timeout = timeout


class IncomparableHashes(ComparisonError):
    """Raised when two perceptual hashes differ in length or are empty."""


class EmptyPalette(ComparisonError):
    """Raised when a palette comparison has no colors to work with."""


def _shorten(url: str, limit: int = 80) -> str:
    # data: URIs carry the whole image inline
    if len(url) <= limit:
        return url
    return f"{url[:limit]}..."
