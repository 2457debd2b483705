"""Decode and resample product images into a consistent format."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..errors import LoadError

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]


def to_rgba(image_bytes: bytes, reference: str = "<bytes>") -> Image.Image:
    """Return a fully loaded Pillow image in RGBA mode.

    SVG payloads are rasterised when ``cairosvg`` is installed.
    """
    if not image_bytes:
        raise LoadError(reference, "empty image payload")

    data = image_bytes
    if looks_like_svg(image_bytes):
        if cairosvg is None:
            raise LoadError(reference, "SVG images require the optional cairosvg package")
        try:
            data = cairosvg.svg2png(bytestring=image_bytes)  # type: ignore[attr-defined]
        except Exception as exc:  # noqa: BLE001 - cairosvg raises assorted parser errors
            raise LoadError(reference, f"could not rasterise SVG ({exc})") from exc

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise LoadError(reference, f"cannot decode image ({exc})") from exc
    except (OSError, ValueError) as exc:
        raise LoadError(reference, f"corrupt image data ({exc})") from exc


def resize_square(
    img: Image.Image,
    size: int,
    resample: Image.Resampling = Image.Resampling.LANCZOS,
) -> Image.Image:
    """Return *img* resized to a *size* by *size* RGBA image."""
    if size <= 0:
        raise ValueError("Size must be a positive integer")

    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return img.resize((size, size), resample)


def looks_like_svg(image_bytes: bytes) -> bool:
    snippet = image_bytes[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )
