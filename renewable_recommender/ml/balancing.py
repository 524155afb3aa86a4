"""
Class balancing for the imbalanced renewable-potential dataset.

Labelled rows are overwhelmingly ``solar``; ``eolica`` and ``hibrida`` are
rare.  Without balancing the forest would predict solar almost everywhere.

Rules
-----
    max_samples = min(cap, max(10·|eolica|, 5·|hibrida|, 50))      cap = 200

    solar   : subsample WITHOUT replacement to min(max_samples, |solar|)
    eolica  : if |eolica| < 10, oversample WITH replacement up to
              ceil(min(20, max_samples / 4)); otherwise unchanged
    hibrida : if |hibrida| < 10, oversample WITH replacement up to
              ceil(min(40, max_samples / 2)); otherwise unchanged

An empty minority group stays empty (nothing to duplicate).  The three groups
are concatenated and shuffled.

All randomness comes from the ``numpy.random.Generator`` passed in, so a
seeded generator makes balancing reproducible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

import numpy as np

from renewable_recommender.taxonomy.technology import Technology

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MINORITY_THRESHOLD = 10
_WIND_TARGET_CAP = 20
_HYBRID_TARGET_CAP = 40
_MIN_MAX_SAMPLES = 50


@dataclass(frozen=True)
class BalancedSet:
    """Shuffled, balanced training rows.

    Attributes:
        features: Normalised feature rows.
        labels: Label slug per row.
        max_samples: The ``max_samples`` bound used for this run.
    """

    features: list[list[float]]
    labels: list[str]
    max_samples: int

    def __len__(self) -> int:
        return len(self.labels)

    def class_counts(self) -> dict[str, int]:
        return {t.value: self.labels.count(t.value) for t in Technology}


def compute_max_samples(n_wind: int, n_hybrid: int, cap: int = 200) -> int:
    return min(cap, max(10 * n_wind, 5 * n_hybrid, _MIN_MAX_SAMPLES))


def subsample(items: Sequence[T], size: int, rng: np.random.Generator) -> list[T]:
    """Draw ``size`` distinct items without replacement (all of them if fewer)."""
    if len(items) <= size:
        return list(items)
    idx = rng.choice(len(items), size=size, replace=False)
    return [items[i] for i in idx]


def oversample(items: Sequence[T], target: int, rng: np.random.Generator) -> list[T]:
    """Append random duplicates until ``target`` items (keeps all originals)."""
    if not items:
        return []
    out = list(items)
    if len(out) >= target:
        return out
    extra = rng.integers(0, len(items), size=target - len(out))
    out.extend(items[i] for i in extra)
    return out


def balance(
    groups: dict[str, list[list[float]]],
    rng: np.random.Generator,
    cap: int = 200,
) -> BalancedSet:
    """Balance per-class feature rows and shuffle them into one set.

    Args:
        groups: Label slug → normalised feature rows. Missing keys count as empty.
        rng: Seeded generator used for every random draw.
        cap: Upper bound on ``max_samples``.

    Returns:
        ``BalancedSet`` (possibly empty when ``groups`` holds no rows).
    """
    solar = groups.get(Technology.SOLAR.value, [])
    wind = groups.get(Technology.WIND.value, [])
    hybrid = groups.get(Technology.HYBRID.value, [])

    max_samples = compute_max_samples(len(wind), len(hybrid), cap)

    solar_bal = subsample(solar, min(max_samples, len(solar)), rng)

    if len(wind) < _MINORITY_THRESHOLD:
        wind_bal = oversample(wind, math.ceil(min(_WIND_TARGET_CAP, max_samples / 4)), rng)
    else:
        wind_bal = list(wind)

    if len(hybrid) < _MINORITY_THRESHOLD:
        hybrid_bal = oversample(hybrid, math.ceil(min(_HYBRID_TARGET_CAP, max_samples / 2)), rng)
    else:
        hybrid_bal = list(hybrid)

    rows: list[tuple[list[float], str]] = (
        [(f, Technology.SOLAR.value) for f in solar_bal]
        + [(f, Technology.WIND.value) for f in wind_bal]
        + [(f, Technology.HYBRID.value) for f in hybrid_bal]
    )
    order = rng.permutation(len(rows))
    shuffled = [rows[i] for i in order]

    logger.debug(
        "Balanced classes: solar %d→%d, eolica %d→%d, hibrida %d→%d (max_samples=%d)",
        len(solar), len(solar_bal), len(wind), len(wind_bal),
        len(hybrid), len(hybrid_bal), max_samples,
    )

    return BalancedSet(
        features=[list(f) for f, _ in shuffled],
        labels=[label for _, label in shuffled],
        max_samples=max_samples,
    )
