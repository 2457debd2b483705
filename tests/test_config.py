import pytest

from product_dedup.config import DetectorConfig, load_config, save_config


def test_defaults():
    config = DetectorConfig()
    assert (config.hash_size, config.color_grid, config.color_count) == (16, 40, 5)
    assert (config.hash_weight, config.color_weight) == (0.6, 0.4)
    assert (config.match_threshold, config.medium_confidence, config.high_confidence) == (65.0, 75.0, 85.0)
    assert (config.hash_timeout, config.color_timeout) == (10.0, 8.0)


@pytest.mark.parametrize(
    "changes",
    [
        {"hash_weight": 0.7},
        {"hash_weight": -0.2, "color_weight": 1.2},
        {"match_threshold": 80.0},
        {"high_confidence": 101.0},
        {"hash_size": 1},
        {"color_count": 0},
        {"alpha_threshold": 300},
        {"color_timeout": 0},
    ],
)
def test_invalid_values_are_rejected(changes):
    with pytest.raises(ValueError):
        DetectorConfig(**changes)


def test_replace_returns_updated_copy():
    config = DetectorConfig()
    updated = config.replace(max_workers=4)
    assert updated.max_workers == 4
    assert config.max_workers == 1


def test_load_config_reads_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("duplicate_detection:\n  match_threshold: 60\n  hash_size: 8\n", encoding="utf-8")
    config = load_config(path)
    assert config.match_threshold == 60
    assert config.hash_size == 8
    assert config.high_confidence == 85.0


def test_load_config_reads_top_level(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("hash_weight: 0.5\ncolor_weight: 0.5\n", encoding="utf-8")
    assert load_config(path).hash_weight == 0.5


def test_load_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ssim_threshold: 0.9\n", encoding="utf-8")
    with pytest.raises(ValueError, match="ssim_threshold"):
        load_config(path)


def test_missing_config_yields_defaults(tmp_path):
    assert load_config(tmp_path / "absent.yaml") == DetectorConfig()
    assert load_config(None) == DetectorConfig()


def test_saved_config_loads_back(tmp_path):
    config = DetectorConfig(match_threshold=70.0, max_workers=2)
    assert load_config(save_config(config, tmp_path / "config.yaml")) == config


@pytest.mark.parametrize(
    "changes",
    [
        {"hash_size": 16.5},
        {"max_workers": "4"},
        {"color_count": True},
        {"alpha_threshold": 128.0},
        {"match_threshold": "65"},
        {"hash_timeout": None},
        {"cache_bust": "yes"},
    ],
)
def test_wrongly_typed_values_are_rejected(changes):
    with pytest.raises(ValueError):
        DetectorConfig(**changes)


def test_wrongly_typed_yaml_value_fails_on_load(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("hash_size: 16.5\n", encoding="utf-8")
    with pytest.raises(ValueError, match="hash_size"):
        load_config(path)
