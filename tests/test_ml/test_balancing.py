"""
Tests for renewable_recommender.ml.balancing.

What we test
------------
compute_max_samples():
  - Floor of 50, scaling with minority sizes, capped at ``cap``.

subsample() / oversample():
  - Subsampling draws distinct items and never exceeds ``size``.
  - Oversampling keeps every original and pads with duplicates.
  - An empty group stays empty.

balance():
  - Solar is cut to max_samples; small minorities are padded to their targets.
  - Minorities of 10 or more are left unchanged.
  - Same seed → identical row order; the result is shuffled.
"""

from __future__ import annotations

import numpy as np

from renewable_recommender.ml.balancing import (
    balance,
    compute_max_samples,
    oversample,
    subsample,
)


def _rows(n: int, tag: float) -> list[list[float]]:
    """``n`` distinct feature rows whose first component identifies the group."""
    return [[tag, float(i)] for i in range(n)]


# ── compute_max_samples ───────────────────────────────────────────────────────

def test_max_samples_floor():
    assert compute_max_samples(0, 0) == 50
    assert compute_max_samples(3, 2) == 50


def test_max_samples_scales_with_minorities():
    assert compute_max_samples(12, 0) == 120
    assert compute_max_samples(0, 30) == 150


def test_max_samples_is_capped():
    assert compute_max_samples(30, 0) == 200
    assert compute_max_samples(30, 0, cap=80) == 80


# ── subsample / oversample ────────────────────────────────────────────────────

def test_subsample_draws_distinct_items():
    rng = np.random.default_rng(0)
    items = list(range(100))
    drawn = subsample(items, 30, rng)
    assert len(drawn) == 30
    assert len(set(drawn)) == 30


def test_subsample_returns_all_when_smaller():
    rng = np.random.default_rng(0)
    assert subsample([1, 2, 3], 10, rng) == [1, 2, 3]


def test_oversample_keeps_originals():
    rng = np.random.default_rng(0)
    out = oversample(["a", "b", "c"], 13, rng)
    assert len(out) == 13
    assert out[:3] == ["a", "b", "c"]
    assert set(out) == {"a", "b", "c"}


def test_oversample_empty_stays_empty():
    rng = np.random.default_rng(0)
    assert oversample([], 20, rng) == []


# ── balance ───────────────────────────────────────────────────────────────────

def test_balance_targets_with_small_minorities():
    rng = np.random.default_rng(42)
    groups = {"solar": _rows(100, 0.0), "eolica": _rows(3, 1.0), "hibrida": _rows(2, 2.0)}

    result = balance(groups, rng)

    # max_samples = 50 → solar 50, eolica ceil(min(20, 12.5)) = 13, hibrida ceil(min(40, 25)) = 25
    assert result.max_samples == 50
    assert result.class_counts() == {"solar": 50, "eolica": 13, "hibrida": 25}
    assert len(result) == 88


def test_balance_solar_rows_are_distinct():
    rng = np.random.default_rng(42)
    groups = {"solar": _rows(100, 0.0), "eolica": _rows(3, 1.0), "hibrida": []}
    result = balance(groups, rng)

    solar_rows = [tuple(f) for f, lbl in zip(result.features, result.labels) if lbl == "solar"]
    assert len(solar_rows) == len(set(solar_rows))


def test_balance_large_minority_unchanged():
    rng = np.random.default_rng(1)
    groups = {"solar": _rows(300, 0.0), "eolica": _rows(12, 1.0), "hibrida": _rows(10, 2.0)}

    result = balance(groups, rng)

    # max_samples = min(200, max(120, 50, 50)) = 120
    assert result.max_samples == 120
    assert result.class_counts() == {"solar": 120, "eolica": 12, "hibrida": 10}


def test_balance_empty_minority_stays_empty():
    rng = np.random.default_rng(7)
    result = balance({"solar": _rows(5, 0.0)}, rng)
    assert result.class_counts() == {"solar": 5, "eolica": 0, "hibrida": 0}


def test_balance_with_no_rows_is_empty():
    rng = np.random.default_rng(7)
    result = balance({}, rng)
    assert len(result) == 0


def test_balance_features_match_labels():
    rng = np.random.default_rng(3)
    groups = {"solar": _rows(40, 0.0), "eolica": _rows(4, 1.0), "hibrida": _rows(4, 2.0)}
    result = balance(groups, rng)

    tag_for = {"solar": 0.0, "eolica": 1.0, "hibrida": 2.0}
    for features, label in zip(result.features, result.labels):
        assert features[0] == tag_for[label]


def test_balance_is_reproducible_with_seed():
    groups = {"solar": _rows(80, 0.0), "eolica": _rows(5, 1.0), "hibrida": _rows(3, 2.0)}

    a = balance(groups, np.random.default_rng(42))
    b = balance(groups, np.random.default_rng(42))

    assert a.labels == b.labels
    assert a.features == b.features


def test_balance_shuffles_classes():
    rng = np.random.default_rng(42)
    groups = {"solar": _rows(50, 0.0), "eolica": _rows(5, 1.0), "hibrida": _rows(5, 2.0)}
    result = balance(groups, rng)

    # Unshuffled concatenation would start with every solar row.
    assert result.labels[:50] != ["solar"] * 50
