"""Detect whether a new product photo duplicates an existing catalog image."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Sequence, Tuple

import imagehash
from tqdm import tqdm

from ..config import DetectorConfig
from ..errors import ComparisonError
from ..features.color import RGB, dominant_colors, palette_similarity
from ..features.perceptual import average_luminosity_hash, hash_similarity
from ..io.models import CandidateScore, CatalogProduct, ComparisonResult, PairScore
from ..load.loader import ImageLoader, Loader
from .similarity import classify, combine, round_similarity

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """Compare a new product image against the images of a catalog.

    The detector holds configuration only. :meth:`detect` never raises for
    load or extraction failures: a failing candidate contributes zero
    similarity and a failing subject image yields a no-match verdict.
    """

    def __init__(self, config: DetectorConfig | None = None, loader: Loader | None = None) -> None:
        self.config = config or DetectorConfig()
        self.loader = loader or ImageLoader(cache_bust=self.config.cache_bust)

    def image_hash(self, url: str) -> imagehash.ImageHash:
        """Load *url* and return its luminosity hash."""
        image = self.loader.load(url, self.config.hash_timeout)
        try:
            return average_luminosity_hash(image, self.config.hash_size)
        finally:
            image.close()

    def image_palette(self, url: str) -> List[RGB]:
        """Load *url* and return its dominant colors."""
        image = self.loader.load(url, self.config.color_timeout)
        try:
            return dominant_colors(
                image,
                k=self.config.color_count,
                grid=self.config.color_grid,
                bucket=self.config.color_bucket,
                alpha_threshold=self.config.alpha_threshold,
            )
        finally:
            image.close()

    def compare_pair(self, url_a: str, url_b: str) -> PairScore:
        """Return the similarity components of two explicit image references."""
        score = PairScore()
        try:
            score.hash_similarity = hash_similarity(self.image_hash(url_a), self.image_hash(url_b))
        except ComparisonError as exc:
            score.hash_error = str(exc)
            logger.warning("Hash comparison degraded: %s", exc)
        try:
            score.color_similarity = palette_similarity(
                self.image_palette(url_a), self.image_palette(url_b)
            )
        except ComparisonError as exc:
            score.color_error = str(exc)
            logger.warning("Color comparison degraded: %s", exc)
        score.combined = combine(score.hash_similarity, score.color_similarity, self.config)
        return score

    def detect(
        self, new_image_url: str, existing_products: Sequence[CatalogProduct]
    ) -> ComparisonResult:
        """Return the best match for *new_image_url* among *existing_products*."""
        products = list(existing_products or ())
        if not new_image_url or not products:
            return ComparisonResult.no_match()

        logger.info("Checking new image against %d catalog products", len(products))
        try:
            new_hash = self.image_hash(new_image_url)
        except ComparisonError as exc:
            logger.warning("Could not hash new image, reporting no match: %s", exc)
            return ComparisonResult.no_match(failures=1, subject_failed=True)

        new_palette: List[RGB] | None
        try:
            new_palette = self.image_palette(new_image_url)
        except ComparisonError as exc:
            logger.warning("Could not extract colors of new image: %s", exc)
            new_palette = None

        indexed: List[Tuple[int, CatalogProduct]] = []
        for index, product in enumerate(products):
            if not product.has_image:
                logger.debug("Skipping product %s (%s): no image", product.id, product.name)
                continue
            indexed.append((index, product))
        skipped = len(products) - len(indexed)

        candidates = self._score_all(indexed, new_hash, new_palette)
        failures = sum(
            (candidate.score.hash_error is not None) + (candidate.score.color_error is not None)
            for candidate in candidates
        )

        best: CandidateScore | None = None
        best_similarity = 0.0
        for candidate in candidates:
            if candidate.score.combined > best_similarity:
                best_similarity = candidate.score.combined
                best = candidate

        is_match, confidence = classify(best_similarity, self.config)
        result = ComparisonResult(
            is_match=is_match,
            similarity=round_similarity(best_similarity),
            confidence=confidence,
            matched_product=best.product if is_match and best is not None else None,
            hash_similarity=round_similarity(best.score.hash_similarity) if best else 0.0,
            color_similarity=round_similarity(best.score.color_similarity) if best else 0.0,
            compared=len(candidates),
            skipped=skipped,
            failures=failures,
            candidates=tuple(candidates),
        )

        if is_match and best is not None:
            logger.info(
                "Duplicate of %s (%s): similarity %.1f%% (hash %.1f%%, color %.1f%%), confidence %s",
                best.product.id,
                best.product.name,
                best_similarity,
                best.score.hash_similarity,
                best.score.color_similarity,
                confidence.value,
            )
        else:
            logger.info("No duplicate found (best score %.1f%%)", best_similarity)
        if result.inconclusive:
            logger.warning("Every comparison failed; the no-match verdict is inconclusive")
        return result

    def _score_all(
        self,
        indexed: Sequence[Tuple[int, CatalogProduct]],
        new_hash: imagehash.ImageHash,
        new_palette: List[RGB] | None,
    ) -> List[CandidateScore]:
        def score(item: Tuple[int, CatalogProduct]) -> CandidateScore:
            index, product = item
            return CandidateScore(index, product, self._score_candidate(product, new_hash, new_palette))

        workers = min(self.config.max_workers, len(indexed))
        if workers <= 1:
            return [score(item) for item in self._progress(indexed)]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(self._progress(executor.map(score, indexed), total=len(indexed)))
        # ties resolve by catalog position
        return sorted(results, key=lambda candidate: candidate.index)

    def _score_candidate(
        self,
        product: CatalogProduct,
        new_hash: imagehash.ImageHash,
        new_palette: List[RGB] | None,
    ) -> PairScore:
        url = product.image_url or ""
        score = PairScore()

        try:
            score.hash_similarity = hash_similarity(new_hash, self.image_hash(url))
        except ComparisonError as exc:
            score.hash_error = str(exc)
            logger.warning("Hash comparison with %s (%s) failed: %s", product.id, product.name, exc)

        if new_palette is None:
            score.color_error = "new image has no color signal"
        else:
            try:
                score.color_similarity = palette_similarity(new_palette, self.image_palette(url))
            except ComparisonError as exc:
                score.color_error = str(exc)
                logger.warning("Color comparison with %s (%s) failed: %s", product.id, product.name, exc)

        score.combined = combine(score.hash_similarity, score.color_similarity, self.config)
        logger.debug(
            "%s (%s): hash %.1f%%, color %.1f%%, combined %.1f%%",
            product.id,
            product.name,
            score.hash_similarity,
            score.color_similarity,
            score.combined,
        )
        return score

    def _progress(self, iterable: Iterable, total: int | None = None) -> Iterable:
        if not self.config.show_progress:
            return iterable
        return tqdm(iterable, total=total, desc="Comparing products", unit="product", leave=False)
