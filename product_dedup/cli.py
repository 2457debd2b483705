"""Command-line interface for the product_dedup project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from .config import DetectorConfig, load_config
from .errors import ComparisonError
from .features.perceptual import hash_to_bits
from .io.catalog import read_catalog
from .io.models import ComparisonResult
from .io.outputs import write_result, write_scores
from .match.detector import DuplicateDetector


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the duplicate checker."""
    parser = argparse.ArgumentParser(
        description="Detect near-duplicate product photos in a shop catalog."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML file overriding detector thresholds and weights.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser(
        "check", help="Compare a new product photo against every catalog image."
    )
    check.add_argument(
        "--image",
        required=True,
        help="URL, data URI or file path of the new product photo.",
    )
    check.add_argument(
        "--catalog",
        required=True,
        help="Path to a JSON file listing products with id, name and imageUrl.",
    )
    check.add_argument(
        "--out",
        default=None,
        help="Directory where result.json and scores.parquet will be written.",
    )
    check.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of catalog images to compare in parallel.",
    )
    check.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide the progress bar.",
    )

    compare = subparsers.add_parser(
        "compare", help="Show the similarity components of two images."
    )
    compare.add_argument("first", help="Reference of the first image.")
    compare.add_argument("second", help="Reference of the second image.")
    return parser.parse_args(list(argv) if argv is not None else None)


def _print_result(result: ComparisonResult) -> None:
    if result.is_match and result.matched_product is not None:
        product = result.matched_product
        print(f"[match] {product.name} ({product.id})")
    else:
        print("[no match]")
    print(
        f"  similarity={result.similarity:.1f}% confidence={result.confidence.value}"
        f" (hash={result.hash_similarity:.1f}%, color={result.color_similarity:.1f}%)"
    )
    print(
        f"  compared={result.compared} skipped={result.skipped} failures={result.failures}"
    )
    if result.inconclusive:
        print("  [warn] comparisons failed; this verdict is inconclusive")


def _run_check(args: argparse.Namespace, config: DetectorConfig) -> int:
    changes: dict[str, object] = {"show_progress": not args.no_progress}
    if args.workers is not None:
        changes["max_workers"] = args.workers
    detector = DuplicateDetector(config.replace(**changes))

    products = read_catalog(Path(args.catalog))
    print(f"[catalog] {len(products)} products")
    result = detector.detect(args.image, products)
    _print_result(result)

    if args.out:
        out_dir = Path(args.out)
        out_dir.mkdir(parents=True, exist_ok=True)
        result_path = write_result(out_dir / "result.json", result)
        print(f"[saved] {result_path}")
        if result.candidates:
            scores_path = write_scores(out_dir / "scores.parquet", result)
            print(f"[saved] {scores_path}")
    return 0


def _run_compare(args: argparse.Namespace, config: DetectorConfig) -> int:
    detector = DuplicateDetector(config)
    score = detector.compare_pair(args.first, args.second)
    print(f"hash similarity:  {score.hash_similarity:.1f}%")
    print(f"color similarity: {score.color_similarity:.1f}%")
    print(f"combined:         {score.combined:.1f}%")
    if score.hash_error is None:
        for label, reference in (("first", args.first), ("second", args.second)):
            try:
                value = detector.image_hash(reference)
            except ComparisonError as exc:
                print(f"[warn] {label} hash unavailable: {exc}")
                continue
            print(f"{label} hash: {value} ({hash_to_bits(value)[:32]}...)")
    for error in (score.hash_error, score.color_error):
        if error:
            print(f"[warn] {error}")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config)
    if args.command == "check":
        return _run_check(args, config)
    return _run_compare(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
