"""Similarity scoring between product images."""

from __future__ import annotations

import math
from typing import Tuple

from ..config import DetectorConfig
from ..io.models import Confidence

DEFAULT_CONFIG = DetectorConfig()


def combine(
    hash_similarity: float,
    color_similarity: float,
    config: DetectorConfig = DEFAULT_CONFIG,
) -> float:
    """Return the weighted similarity of the two components."""
    return (
        float(hash_similarity) * config.hash_weight
        + float(color_similarity) * config.color_weight
    )


def classify(
    similarity: float, config: DetectorConfig = DEFAULT_CONFIG
) -> Tuple[bool, Confidence]:
    """Return the match decision and confidence tier for *similarity*.

    Each boundary belongs to the higher tier.
    """
    is_match = similarity >= config.match_threshold
    if similarity >= config.high_confidence:
        return is_match, Confidence.HIGH
    if similarity >= config.medium_confidence:
        return is_match, Confidence.MEDIUM
    return is_match, Confidence.LOW


def round_similarity(value: float) -> float:
    """Round *value* half-up to one decimal place."""
    return math.floor(float(value) * 10.0 + 0.5) / 10.0
