"""Tunable parameters for product image duplicate detection."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

_SECTION = "duplicate_detection"
_INT_FIELDS = ("hash_size", "color_grid", "color_count", "color_bucket", "max_workers")
_NUMBER_FIELDS = (
    "hash_weight",
    "color_weight",
    "match_threshold",
    "medium_confidence",
    "high_confidence",
    "hash_timeout",
    "color_timeout",
)
_BOOL_FIELDS = ("cache_bust", "show_progress")


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """Configuration for the duplicate detector.

    Similarities and thresholds are percentages in ``[0, 100]``. Timeouts are
    in seconds. ``hash_weight`` and ``color_weight`` must sum to 1.0.
    """

    hash_size: int = 16
    color_grid: int = 40
    color_count: int = 5
    color_bucket: int = 16
    alpha_threshold: int = 128
    hash_weight: float = 0.6
    color_weight: float = 0.4
    match_threshold: float = 65.0
    medium_confidence: float = 75.0
    high_confidence: float = 85.0
    hash_timeout: float = 10.0
    color_timeout: float = 8.0
    cache_bust: bool = True
    max_workers: int = 1
    show_progress: bool = False

    def __post_init__(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not _is_int(self.alpha_threshold):
            raise ValueError(f"alpha_threshold must be an integer, got {self.alpha_threshold!r}")
        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                raise ValueError(f"{name} must be a number, got {value!r}")
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false")
        if self.hash_size < 2:
            raise ValueError("hash_size must be at least 2")
        if not 0 <= self.alpha_threshold <= 255:
            raise ValueError("alpha_threshold must be within [0, 255]")
        if self.hash_weight < 0 or self.color_weight < 0:
            raise ValueError("weights must not be negative")
        if not math.isclose(self.hash_weight + self.color_weight, 1.0, abs_tol=1e-9):
            raise ValueError("hash_weight and color_weight must sum to 1.0")
        for name in ("match_threshold", "medium_confidence", "high_confidence"):
            value = float(getattr(self, name))
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be within [0, 100]")
        if not self.match_threshold <= self.medium_confidence <= self.high_confidence:
            raise ValueError(
                "thresholds must satisfy match_threshold <= medium_confidence <= high_confidence"
            )
        if self.hash_timeout <= 0 or self.color_timeout <= 0:
            raise ValueError("timeouts must be positive")

    def replace(self, **changes: Any) -> "DetectorConfig":
        """Return a copy of this configuration with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DetectorConfig":
        """Build a configuration from *values*, rejecting unknown keys."""
        known = {item.name for item in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(values))


def load_config(path: str | Path | None) -> DetectorConfig:
    """Load a :class:`DetectorConfig` from a YAML file.

    The settings may sit at the top level or under a ``duplicate_detection``
    section. A missing file yields the defaults.
    """
    if path is None:
        return DetectorConfig()
    config_path = Path(path)
    if not config_path.exists():
        return DetectorConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}

    if not isinstance(payload, Mapping):
        raise ValueError(f"Configuration in {config_path} must be a mapping")
    section = payload.get(_SECTION, payload)
    if not isinstance(section, Mapping):
        raise ValueError(f"'{_SECTION}' in {config_path} must be a mapping")
    return DetectorConfig.from_mapping(section)


def save_config(config: DetectorConfig, path: str | Path) -> Path:
    """Write *config* to *path* as YAML and return the path."""
    config_path = Path(path)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({_SECTION: config.to_dict()}, handle, default_flow_style=False, indent=2)
    return config_path


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
