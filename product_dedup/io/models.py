"""Data models shared across the duplicate detection pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


class Confidence(str, Enum):
    """Coarse trust tier derived from the best similarity score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class CatalogProduct:
    """Read-only view of a persisted product."""

    id: str
    name: str
    image_url: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url and self.image_url.strip())

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "imageUrl": self.image_url}


@dataclass(slots=True)
class PairScore:
    """Similarity components for one pair of images."""

    hash_similarity: float = 0.0
    color_similarity: float = 0.0
    combined: float = 0.0
    hash_error: str | None = None
    color_error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.hash_error is not None or self.color_error is not None

    @property
    def failed(self) -> bool:
        """True when neither component could be computed."""
        return self.hash_error is not None and self.color_error is not None


@dataclass(slots=True)
class CandidateScore:
    """Score of one catalog product against the new image."""

    index: int
    product: CatalogProduct
    score: PairScore


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """Verdict of a duplicate check."""

    is_match: bool
    similarity: float
    confidence: Confidence
    matched_product: CatalogProduct | None = None
    hash_similarity: float = 0.0
    color_similarity: float = 0.0
    compared: int = 0
    skipped: int = 0
    failures: int = 0
    subject_failed: bool = False
    candidates: Tuple[CandidateScore, ...] = field(default=(), compare=False, repr=False)

    @property
    def inconclusive(self) -> bool:
        """True when load failures, not dissimilarity, produced the verdict."""
        if self.subject_failed:
            return True
        if not self.candidates:
            return False
        return all(candidate.score.failed for candidate in self.candidates)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "isMatch": self.is_match,
            "similarity": self.similarity,
            "confidence": self.confidence.value,
        }
        if self.matched_product is not None:
            payload["matchedProduct"] = self.matched_product.to_dict()
        payload.update(
            {
                "hashSimilarity": self.hash_similarity,
                "colorSimilarity": self.color_similarity,
                "compared": self.compared,
                "skipped": self.skipped,
                "failures": self.failures,
                "inconclusive": self.inconclusive,
            }
        )
        return payload

    @classmethod
    def no_match(
        cls,
        *,
        skipped: int = 0,
        failures: int = 0,
        subject_failed: bool = False,
    ) -> "ComparisonResult":
        """Return the trivial no-match verdict."""
        return cls(
            is_match=False,
            similarity=0.0,
            confidence=Confidence.LOW,
            skipped=skipped,
            failures=failures,
            subject_failed=subject_failed,
        )
