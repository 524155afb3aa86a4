"""
Tests for renewable_recommender.ml.feature_selector and ml.heuristics.

What we test
------------
FEATURE_COLS:
  - Fixed order: radiation, wind_speed, elevation, temperature, lat, lon.

raw_features() / fit_scaler() / Scaler.transform():
  - raw_features follows FEATURE_COLS order.
  - Min-max scaling to [0, 1] over the fitted rows.
  - A constant feature maps to 0.5.
  - Values outside the fitted range extrapolate.
  - fit_scaler([]) raises ValueError.

estimate_probabilities():
  - Sums to 1, favours the matching class, returns zeros when all terms vanish.
"""

from __future__ import annotations

import math

import pytest

from renewable_recommender.ml.feature_selector import (
    FEATURE_COLS,
    FEATURE_INDEX,
    FeatureStats,
    fit_scaler,
    raw_features,
)
from renewable_recommender.ml.heuristics import estimate_probabilities


# ── Feature definition ────────────────────────────────────────────────────────

def test_feature_cols_order():
    assert FEATURE_COLS == ("radiation", "wind_speed", "elevation", "temperature", "lat", "lon")
    assert FEATURE_INDEX["lat"] == 4


def test_raw_features_order(make_record):
    rec = make_record(4.5, -74.2, radiation=5.1, wind_speed=3.2, elevation=2600.0, temperature=14.0)
    assert raw_features(rec) == [5.1, 3.2, 2600.0, 14.0, 4.5, -74.2]


# ── Scaler ────────────────────────────────────────────────────────────────────

def test_fit_scaler_min_max_mean():
    rows = [[1, 0, 0, 10, 4, -75], [3, 4, 100, 30, 6, -73]]
    scaler = fit_scaler(rows)
    stats = scaler.stats["radiation"]
    assert (stats.min, stats.max, stats.mean) == (1.0, 3.0, 2.0)


def test_transform_scales_to_unit_range():
    rows = [[1, 0, 0, 10, 4, -75], [3, 4, 100, 30, 6, -73]]
    scaler = fit_scaler(rows)
    assert scaler.transform(rows[0]) == [0.0] * 6
    assert scaler.transform(rows[1]) == [1.0] * 6
    assert scaler.transform([2, 2, 50, 20, 5, -74]) == pytest.approx([0.5] * 6)


def test_constant_feature_maps_to_half():
    assert FeatureStats(min=7.0, max=7.0, mean=7.0).normalize(7.0) == 0.5
    assert FeatureStats(min=7.0, max=7.0, mean=7.0).normalize(100.0) == 0.5


def test_out_of_range_values_extrapolate():
    stats = FeatureStats(min=0.0, max=10.0, mean=5.0)
    assert stats.normalize(15.0) == pytest.approx(1.5)
    assert stats.normalize(-5.0) == pytest.approx(-0.5)


def test_fit_scaler_rejects_empty_rows():
    with pytest.raises(ValueError, match="zero rows"):
        fit_scaler([])


# ── Heuristic probabilities ───────────────────────────────────────────────────

def _normalized(r: float, w: float, e: float) -> list[float]:
    return [r, w, e, 0.5, 0.5, 0.5]


def test_heuristic_probabilities_sum_to_one():
    probs = estimate_probabilities(_normalized(0.6, 0.3, 0.2))
    assert set(probs) == {"solar", "eolica", "hibrida"}
    assert math.isclose(sum(probs.values()), 1.0)


def test_heuristic_favours_solar_for_high_radiation_calm_wind():
    probs = estimate_probabilities(_normalized(1.0, 0.0, 0.0))
    assert max(probs, key=probs.get) == "solar"


def test_heuristic_favours_wind_for_strong_wind():
    probs = estimate_probabilities(_normalized(0.0, 1.0, 1.0))
    assert max(probs, key=probs.get) == "eolica"


def test_heuristic_all_zero_terms_return_zeros():
    probs = estimate_probabilities(_normalized(-1.0, 0.0, 0.0))
    assert probs == {"solar": 0.0, "eolica": 0.0, "hibrida": 0.0}
