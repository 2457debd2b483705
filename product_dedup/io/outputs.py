"""Output helpers for persisting duplicate check results."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from .models import ComparisonResult

SCORE_COLUMNS = (
    "position",
    "product_id",
    "name",
    "hash_similarity",
    "color_similarity",
    "combined",
    "hash_error",
    "color_error",
)


def write_result(path: Path, result: ComparisonResult) -> Path:
    """Write *result* to *path* as JSON and return the path."""
    path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    return path


def scores_frame(result: ComparisonResult) -> pd.DataFrame:
    """Return one row per compared candidate, in catalog order."""
    rows = [
        {
            "position": candidate.index,
            "product_id": candidate.product.id,
            "name": candidate.product.name,
            "hash_similarity": candidate.score.hash_similarity,
            "color_similarity": candidate.score.color_similarity,
            "combined": candidate.score.combined,
            "hash_error": candidate.score.hash_error,
            "color_error": candidate.score.color_error,
        }
        for candidate in result.candidates
    ]
    return pd.DataFrame(rows, columns=list(SCORE_COLUMNS))


def write_scores(path: Path, result: ComparisonResult) -> Path:
    """Write the per-candidate score table of *result* to *path* as Parquet."""
    frame = scores_frame(result)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_parquet(path, index=False, engine="pyarrow")
    return path
