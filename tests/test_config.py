"""
Tests for renewable_recommender.config.

What we test
------------
AppConfig defaults:
  - Every section is valid with no input.
  - Defaults match the documented thresholds and forest settings.

Validation:
  - Fractions outside (0, 1), k_neighbors < 1, bad log level, inverted
    rule reference points are rejected.

load_config():
  - Reads an explicit TOML file; missing file → FileNotFoundError.
  - local.toml next to the file is deep-merged on top.
  - RENEWABLE_RECOMMENDER_* env vars override TOML values.
  - The committed config/default.toml loads cleanly.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from renewable_recommender.config import (
    AppConfig,
    ForestConfig,
    InterpolationConfig,
    LoggingConfig,
    ScientificConfig,
    _deep_merge,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in ("DATASET_PATH", "LOG_LEVEL", "RANDOM_SEED", "DEBUG"):
        monkeypatch.delenv(f"RENEWABLE_RECOMMENDER_{name}", raising=False)


# ── Defaults ──────────────────────────────────────────────────────────────────

def test_default_config():
    cfg = AppConfig()
    assert cfg.interpolation.k_neighbors == 8
    assert cfg.interpolation.min_distance_deg == 0.001
    assert cfg.forest.n_estimators == 100
    assert cfg.forest.max_depth == 10
    assert cfg.forest.random_seed == 42
    assert cfg.forest.confidence_method == "ensemble"
    assert cfg.scientific.solar_min_radiation == 3.5
    assert cfg.scientific.wind_min_speed == 4.0
    assert cfg.scientific.default_technology == "solar"
    assert cfg.recommendation.dataset_confidence == 0.95
    assert cfg.debug is False


# ── Validation ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("value", [0.0, 1.0, 1.5])
def test_forest_fraction_bounds(value):
    with pytest.raises(ValidationError):
        ForestConfig(feature_fraction=value)


def test_k_neighbors_must_be_positive():
    with pytest.raises(ValidationError):
        InterpolationConfig(k_neighbors=0)


def test_log_level_validated_and_upper_cased():
    assert LoggingConfig(level="debug").level == "DEBUG"
    with pytest.raises(ValidationError):
        LoggingConfig(level="VERBOSE")


def test_inverted_reference_points_rejected():
    with pytest.raises(ValidationError):
        ScientificConfig(solar_min_radiation=6.0, solar_reference_radiation=5.0)


def test_unknown_default_technology_rejected():
    with pytest.raises(ValidationError):
        ScientificConfig(default_technology="geotermica")


# ── load_config ───────────────────────────────────────────────────────────────

def _write_toml(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_explicit_file(tmp_path):
    cfg_path = _write_toml(tmp_path / "app.toml", (
        '[data]\ndataset_path = "elsewhere.csv"\n'
        "[interpolation]\nk_neighbors = 5\n"
        "[forest]\nn_estimators = 25\n"
    ))
    cfg = load_config(cfg_path)
    assert cfg.data.dataset_path == "elsewhere.csv"
    assert cfg.interpolation.k_neighbors == 5
    assert cfg.forest.n_estimators == 25
    assert cfg.forest.max_depth == 10


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_local_toml_overrides(tmp_path):
    cfg_path = _write_toml(tmp_path / "default.toml", "[forest]\nn_estimators = 25\nmax_depth = 6\n")
    _write_toml(tmp_path / "local.toml", "[forest]\nmax_depth = 4\n")

    cfg = load_config(cfg_path)
    assert cfg.forest.n_estimators == 25
    assert cfg.forest.max_depth == 4


def test_env_overrides(tmp_path, monkeypatch):
    cfg_path = _write_toml(tmp_path / "app.toml", "[logging]\nlevel = \"INFO\"\n")
    monkeypatch.setenv("RENEWABLE_RECOMMENDER_DATASET_PATH", "/data/potencial.csv")
    monkeypatch.setenv("RENEWABLE_RECOMMENDER_LOG_LEVEL", "warning")
    monkeypatch.setenv("RENEWABLE_RECOMMENDER_RANDOM_SEED", "7")
    monkeypatch.setenv("RENEWABLE_RECOMMENDER_DEBUG", "true")

    cfg = load_config(cfg_path)
    assert cfg.data.dataset_path == "/data/potencial.csv"
    assert cfg.logging.level == "WARNING"
    assert cfg.forest.random_seed == 7
    assert cfg.debug is True


def test_invalid_toml_value_raises(tmp_path):
    cfg_path = _write_toml(tmp_path / "app.toml", "[forest]\nbagging_fraction = 1.0\n")
    with pytest.raises(ValidationError):
        load_config(cfg_path)


def test_committed_default_toml_loads():
    cfg = load_config()
    assert cfg == load_config(Path(__file__).parent.parent / "config" / "default.toml")
    assert cfg.forest.confidence_method == "ensemble"


def test_deep_merge():
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
