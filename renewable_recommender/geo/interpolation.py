"""
Inverse-distance-weighted (IDW) estimation of environmental parameters.

For a query point without a measurement, each of radiation, wind speed,
elevation and temperature is estimated as

    value = Σ(value_i · w_i) / Σ(w_i),   w_i = 1 / max(d_i, ε)

over the ``k`` nearest records (default 8) with complete, finite values.
``d_i`` is the planar degree distance (see ``models.dataset.degree_distance``)
and ``ε`` (default 0.001°, about 100 m) keeps coincident points finite: a
neighbour closer than ``ε`` gets the maximal weight ``1/ε`` rather than an
unbounded one.

Kilometre distances (``d × 111``) are reported in the metadata only; they
never influence neighbour selection or weights.

Values are NOT rounded here — call ``InterpolationResult.rounded()`` at the
presentation boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from renewable_recommender.config import InterpolationConfig
from renewable_recommender.errors import DatasetUnavailableError, NoValidNeighborsError
from renewable_recommender.models.dataset import degree_distance
from renewable_recommender.models.measurement import MeasurementRecord
from renewable_recommender.models.recommendation import (
    InterpolationMetadata,
    InterpolationResult,
    NeighborInfo,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    record: MeasurementRecord
    distance_deg: float


class SpatialInterpolator:
    """Stateless IDW estimator over a dataset.

    Args:
        config: Interpolation parameters (k, ε, km per degree).
    """

    def __init__(self, config: InterpolationConfig | None = None) -> None:
        self.config = config or InterpolationConfig()

    def nearest_neighbors(
        self,
        lat: float,
        lon: float,
        records: list[MeasurementRecord] | tuple[MeasurementRecord, ...],
    ) -> list[_Candidate]:
        """The ``k`` nearest records with complete environmental values.

        Sorting is stable, so equidistant records keep dataset order.
        """
        candidates = [
            _Candidate(record=rec, distance_deg=degree_distance(lat, lon, rec.lat, rec.lon))
            for rec in records
            if rec.has_complete_environment
        ]
        candidates.sort(key=lambda c: c.distance_deg)
        return candidates[: self.config.k_neighbors]

    def weights(self, distances: list[float]) -> list[float]:
        """Normalised IDW weights for the given degree distances (sum to 1)."""
        eps = self.config.min_distance_deg
        raw = [1.0 / max(d, eps) for d in distances]
        total = sum(raw)
        return [w / total for w in raw]

    def interpolate(
        self,
        lat: float,
        lon: float,
        records: list[MeasurementRecord] | tuple[MeasurementRecord, ...],
    ) -> InterpolationResult:
        """Estimate environmental parameters at ``(lat, lon)``.

        Args:
            lat: Query latitude (territory is NOT checked here; callers do it).
            lon: Query longitude.
            records: Dataset records; incomplete ones are skipped.

        Returns:
            Raw (unrounded) ``InterpolationResult`` with full neighbour metadata.

        Raises:
            DatasetUnavailableError: If ``records`` is empty.
            NoValidNeighborsError: If no record has complete, finite values.
        """
        if not records:
            raise DatasetUnavailableError()

        neighbors = self.nearest_neighbors(lat, lon, records)
        if not neighbors:
            raise NoValidNeighborsError(len(records))

        weights = self.weights([n.distance_deg for n in neighbors])

        radiation = wind = elevation = temperature = 0.0
        for n, w in zip(neighbors, weights):
            env = n.record.environment
            radiation   += env.radiation * w
            wind        += env.wind_speed * w
            elevation   += env.elevation * w
            temperature += env.temperature * w

        km = self.config.km_per_degree
        used = tuple(
            NeighborInfo(
                municipality=n.record.municipality,
                department=n.record.department,
                distance_deg=n.distance_deg,
                distance_km=n.distance_deg * km,
                weight=w,
            )
            for n, w in zip(neighbors, weights)
        )
        nearest = neighbors[0]
        metadata = InterpolationMetadata(
            method="IDW",
            neighbor_count=len(neighbors),
            nearest_distance_km=nearest.distance_deg * km,
            nearest_municipality=nearest.record.municipality,
            nearest_department=nearest.record.department,
            used_neighbors=used,
        )

        logger.debug(
            "IDW at (%.4f, %.4f): %d neighbour(s), nearest=%s (%.1f km)",
            lat, lon, len(neighbors), nearest.record.municipality,
            metadata.nearest_distance_km,
        )

        return InterpolationResult(
            radiation=radiation,
            wind_speed=wind,
            elevation=elevation,
            temperature=temperature,
            metadata=metadata,
        )
