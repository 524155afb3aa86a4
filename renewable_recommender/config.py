"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``RENEWABLE_RECOMMENDER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine, the classifiers and the CLI receive an ``AppConfig`` (or one of
its sections) — never raw dicts or env var lookups scattered through the
codebase.  Every section has working defaults, so ``AppConfig()`` is a valid
configuration for tests and library use.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Location of the measurement dataset."""

    model_config = ConfigDict(frozen=True)

    dataset_path: str = "data/dataset_potencial_renovable_potencial.csv"


class InterpolationConfig(BaseModel):
    """Inverse-distance-weighting parameters.

    ``km_per_degree`` is a planar approximation used for reporting only;
    neighbour selection always runs on raw degree distances.
    """

    model_config = ConfigDict(frozen=True)

    k_neighbors: int = 8
    min_distance_deg: float = 0.001      # ≈ 100 m, guards 1/d for coincident points
    km_per_degree: float = 111.0
    snap_radius_deg: float = 0.05        # ≈ 5 km, direct record lookup radius

    @field_validator("k_neighbors")
    @classmethod
    def validate_k(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"k_neighbors must be >= 1, got {v}.")
        return v

    @field_validator("min_distance_deg", "km_per_degree")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Value must be > 0, got {v}.")
        return v


class ForestConfig(BaseModel):
    """Bagged decision-tree ensemble and class-balancing parameters."""

    model_config = ConfigDict(frozen=True)

    n_estimators: int = 100
    max_depth: int = 10
    min_samples_split: int = 5
    min_samples_leaf: int = 2
    feature_fraction: float = 0.8
    bagging_fraction: float = 0.8
    max_samples_cap: int = 200
    random_seed: int = 42
    confidence_method: Literal["ensemble", "heuristic"] = "ensemble"

    @field_validator("feature_fraction", "bagging_fraction")
    @classmethod
    def validate_fraction(cls, v: float) -> float:
        # LightGBM random-forest mode needs a strict subsample on both axes.
        if not 0.0 < v < 1.0:
            raise ValueError(f"Fraction must be in (0.0, 1.0), got {v}.")
        return v

    @field_validator("n_estimators", "max_depth", "min_samples_leaf", "max_samples_cap")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v


class ScientificConfig(BaseModel):
    """Thresholds for the rule-based classifier (kWh/m²/day and m/s)."""

    model_config = ConfigDict(frozen=True)

    solar_min_radiation: float = 3.5
    solar_good_radiation: float = 4.5
    solar_reference_radiation: float = 6.0
    wind_min_speed: float = 4.0
    wind_good_speed: float = 6.0
    wind_reference_speed: float = 8.0
    hybrid_score_margin: float = 20.0
    default_technology: Literal["solar", "eolica", "hibrida"] = "solar"
    default_confidence: float = 0.3

    @model_validator(mode="after")
    def validate_reference_points(self) -> "ScientificConfig":
        if self.solar_reference_radiation <= self.solar_min_radiation:
            raise ValueError(
                "solar_reference_radiation must be greater than solar_min_radiation."
            )
        if self.wind_reference_speed <= self.wind_min_speed:
            raise ValueError("wind_reference_speed must be greater than wind_min_speed.")
        return self


class RecommendationConfig(BaseModel):
    """Fusion-policy settings."""

    model_config = ConfigDict(frozen=True)

    dataset_confidence: float = 0.95

    @field_validator("dataset_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"dataset_confidence must be in (0.0, 1.0], got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    It is constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    interpolation: InterpolationConfig = InterpolationConfig()
    forest: ForestConfig = ForestConfig()
    scientific: ScientificConfig = ScientificConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply RENEWABLE_RECOMMENDER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply RENEWABLE_RECOMMENDER_* env vars to the raw config dict.

    Supported overrides:
      RENEWABLE_RECOMMENDER_DATASET_PATH → raw["data"]["dataset_path"]
      RENEWABLE_RECOMMENDER_LOG_LEVEL    → raw["logging"]["level"]
      RENEWABLE_RECOMMENDER_RANDOM_SEED  → raw["forest"]["random_seed"]
      RENEWABLE_RECOMMENDER_DEBUG        → raw["debug"]
    """
    if dataset_path := os.environ.get("RENEWABLE_RECOMMENDER_DATASET_PATH"):
        raw.setdefault("data", {})["dataset_path"] = dataset_path

    if log_level := os.environ.get("RENEWABLE_RECOMMENDER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed := os.environ.get("RENEWABLE_RECOMMENDER_RANDOM_SEED"):
        raw.setdefault("forest", {})["random_seed"] = int(seed)

    if debug := os.environ.get("RENEWABLE_RECOMMENDER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        interpolation=InterpolationConfig(**raw.get("interpolation", {})),
        forest=ForestConfig(**raw.get("forest", {})),
        scientific=ScientificConfig(**raw.get("scientific", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
