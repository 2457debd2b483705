"""Dominant color extraction and palette comparison."""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence

import numpy as np
from PIL import Image

from ..errors import EmptyPalette
from ..load.decode import resize_square

RGB = tuple[int, int, int]

DEFAULT_GRID = 40
DEFAULT_COLOR_COUNT = 5
DEFAULT_BUCKET = 16
DEFAULT_ALPHA_THRESHOLD = 128
MAX_CHANNEL_DISTANCE = 255.0


def dominant_colors(
    img: Image.Image,
    k: int = DEFAULT_COLOR_COUNT,
    grid: int = DEFAULT_GRID,
    bucket: int = DEFAULT_BUCKET,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> list[RGB]:
    """Return up to *k* quantised colors of *img*, most frequent first.

    Pixels with alpha below *alpha_threshold* are ignored, so a fully
    transparent image yields an empty palette. Equal counts keep raster order.
    """
    if not isinstance(img, Image.Image):
        raise TypeError("dominant_colors expects a PIL.Image.Image instance")
    if k <= 0:
        return []
    if bucket <= 0:
        raise ValueError("bucket must be a positive integer")

    small = resize_square(img, grid, Image.Resampling.BILINEAR)
    pixels = np.asarray(small, dtype=np.int64).reshape(-1, 4)
    visible = pixels[pixels[:, 3] >= alpha_threshold, :3]
    if visible.size == 0:
        return []

    quantised = (visible // bucket) * bucket
    counts = Counter(tuple(row) for row in quantised.tolist())
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [(int(r), int(g), int(b)) for (r, g, b), _ in ranked[:k]]


def color_distance(c1: Sequence[int], c2: Sequence[int]) -> float:
    """Return the Euclidean RGB distance between two colors."""
    if not c1 or not c2 or len(c1) != 3 or len(c2) != 3:
        return MAX_CHANNEL_DISTANCE
    return math.sqrt(sum((float(a) - float(b)) ** 2 for a, b in zip(c1, c2)))


def palette_similarity(query: Sequence[RGB], candidate: Sequence[RGB]) -> float:
    """Return how well *candidate* covers the colors of *query*, in percent.

    Each query color is matched to its nearest candidate color and the
    per-color similarities are averaged. Not symmetric.
    """
    if not query or not candidate:
        raise EmptyPalette(
            f"Cannot compare palettes of {len(query)} and {len(candidate)} colors"
        )

    total = 0.0
    for color in query:
        best = min(color_distance(color, other) for other in candidate)
        total += max(0.0, (MAX_CHANNEL_DISTANCE - best) / MAX_CHANNEL_DISTANCE * 100.0)
    return total / len(query)
