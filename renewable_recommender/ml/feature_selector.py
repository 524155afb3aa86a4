"""
Feature definition and min-max scaling for the forest classifier.

A ``FeatureVector`` is the 6-tuple

    [radiation, wind_speed, elevation, temperature, lat, lon]

each component min-max normalised against a ``Scaler`` computed once from the
label-bearing training subset.  The same ``Scaler`` must be used at inference
time; it is stored next to the model and swapped with it atomically.

Why lat/lon are features
------------------------
Labelled wind and hybrid sites cluster geographically (La Guajira coast,
Andean ridges); coordinates let the trees separate them from solar sites with
similar radiation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from renewable_recommender.models.measurement import MeasurementRecord

FEATURE_COLS: tuple[str, ...] = (
    "radiation",
    "wind_speed",
    "elevation",
    "temperature",
    "lat",
    "lon",
)

# Index of each column in a FeatureVector.
FEATURE_INDEX: dict[str, int] = {name: i for i, name in enumerate(FEATURE_COLS)}


@dataclass(frozen=True)
class FeatureStats:
    """Per-feature statistics."""

    min: float
    max: float
    mean: float

    def normalize(self, value: float) -> float:
        """Min-max scale ``value``; a constant feature maps to 0.5.

        Values outside the training range extrapolate linearly (< 0 or > 1).
        """
        if self.max == self.min:
            return 0.5
        return (value - self.min) / (self.max - self.min)


@dataclass(frozen=True)
class Scaler:
    """Immutable per-feature min/max/mean, keyed by ``FEATURE_COLS`` name."""

    stats: Mapping[str, FeatureStats]

    def transform(self, raw: Sequence[float]) -> list[float]:
        """Normalise one raw feature row (in ``FEATURE_COLS`` order)."""
        return [self.stats[name].normalize(v) for name, v in zip(FEATURE_COLS, raw)]


def raw_features(record: MeasurementRecord) -> list[float]:
    """Extract the raw feature row of a record (``FEATURE_COLS`` order)."""
    env = record.environment
    return [
        float(env.radiation),
        float(env.wind_speed),
        float(env.elevation),
        float(env.temperature),
        float(record.lat),
        float(record.lon),
    ]


def fit_scaler(rows: Sequence[Sequence[float]]) -> Scaler:
    """Compute min/max/mean per feature over ``rows``.

    Raises:
        ValueError: If ``rows`` is empty.
    """
    if not rows:
        raise ValueError("Cannot fit a scaler on zero rows.")
    stats: dict[str, FeatureStats] = {}
    for i, name in enumerate(FEATURE_COLS):
        column = [float(r[i]) for r in rows]
        stats[name] = FeatureStats(
            min=min(column),
            max=max(column),
            mean=sum(column) / len(column),
        )
    return Scaler(stats=stats)
