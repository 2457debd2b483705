"""Read catalog exports produced by the storefront."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from .models import CatalogProduct

logger = logging.getLogger(__name__)

_IMAGE_KEYS = ("imageUrl", "image_url", "image")


def read_catalog(path: Path) -> list[CatalogProduct]:
    """Return the products listed in the JSON catalog at *path*.

    The file holds either a list of products or an object with a
    ``products`` list. Entries without an ``id`` are skipped.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file does not exist: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Catalog {path} is not valid JSON: {exc}") from exc

    if isinstance(payload, Mapping):
        payload = payload.get("products", [])
    if not isinstance(payload, list):
        raise ValueError(f"Catalog {path} must contain a list of products")
    return list(parse_products(payload))


def parse_products(entries: Iterable[Any]) -> Iterable[CatalogProduct]:
    """Yield a :class:`CatalogProduct` for every well-formed entry."""
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            logger.warning("Skipping catalog entry %d: not an object", position)
            continue
        product_id = entry.get("id")
        if product_id is None or str(product_id).strip() == "":
            logger.warning("Skipping catalog entry %d: missing id", position)
            continue
        image_url = next(
            (entry[key] for key in _IMAGE_KEYS if isinstance(entry.get(key), str)),
            None,
        )
        metadata = {
            key: value
            for key, value in entry.items()
            if key not in ("id", "name") and key not in _IMAGE_KEYS
        }
        yield CatalogProduct(
            id=str(product_id),
            name=str(entry.get("name") or ""),
            image_url=image_url,
            metadata=metadata,
        )
