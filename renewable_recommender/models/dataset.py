"""
Read-only dataset container and department aggregates.

``Dataset`` is owned by the loading collaborator; the engine only holds a
reference.  Records without a finite coordinate pair are dropped at
construction, which is the only filtering applied here — records with
incomplete environmental values stay in the dataset so their labels and
locations remain searchable.

``DepartmentAggregate`` values are derived once per ``Dataset`` and cached;
building a new ``Dataset`` is the only way to refresh them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import cached_property
from typing import Optional

from renewable_recommender.models.measurement import MeasurementRecord, is_finite_number

logger = logging.getLogger(__name__)


def degree_distance(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Planar Euclidean distance in degrees.

    Not geodesic: neighbour selection across the whole codebase
    uses this metric, and ``km = deg × km_per_degree`` is for reporting only.
    """
    return math.sqrt((lat_a - lat_b) ** 2 + (lon_a - lon_b) ** 2)


@dataclass(frozen=True)
class DepartmentAggregate:
    """Mean environmental values for one department.

    Means are taken over member records with a finite value for that field;
    a field with no finite member value is ``None``.

    Attributes:
        department: Department name.
        records: Member records in dataset order.
        mean_radiation: Mean radiation (kWh/m²/day).
        mean_wind_speed: Mean wind speed (m/s).
        mean_elevation: Mean elevation (m).
        mean_temperature: Mean temperature (°C).
    """

    department: str
    records: tuple[MeasurementRecord, ...] = field(repr=False)
    mean_radiation: Optional[float]
    mean_wind_speed: Optional[float]
    mean_elevation: Optional[float]
    mean_temperature: Optional[float]

    @property
    def count(self) -> int:
        return len(self.records)


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    finite = [v for v in values if is_finite_number(v)]
    if not finite:
        return None
    return sum(finite) / len(finite)


def aggregate_by_department(
    records: Iterable[MeasurementRecord],
) -> dict[str, DepartmentAggregate]:
    """Group records by department and compute per-field means.

    Args:
        records: Records to aggregate (dataset order is preserved per group).

    Returns:
        Dict keyed by department name, in first-seen order.
    """
    groups: dict[str, list[MeasurementRecord]] = {}
    for rec in records:
        groups.setdefault(rec.department, []).append(rec)

    return {
        name: DepartmentAggregate(
            department=name,
            records=tuple(members),
            mean_radiation=_mean(r.environment.radiation for r in members),
            mean_wind_speed=_mean(r.environment.wind_speed for r in members),
            mean_elevation=_mean(r.environment.elevation for r in members),
            mean_temperature=_mean(r.environment.temperature for r in members),
        )
        for name, members in groups.items()
    }


@dataclass(frozen=True)
class NearbyRecord:
    """A record found by a radius search, with its degree distance."""

    record: MeasurementRecord
    distance_deg: float


class Dataset:
    """Ordered, immutable collection of ``MeasurementRecord``.

    Args:
        records: Parsed records; those without a finite lat/lon are dropped.
    """

    def __init__(self, records: Iterable[MeasurementRecord] = ()) -> None:
        kept: list[MeasurementRecord] = []
        dropped = 0
        for rec in records:
            if rec.has_valid_location:
                kept.append(rec)
            else:
                dropped += 1
        if dropped:
            logger.warning("Dataset: dropped %d record(s) without valid coordinates.", dropped)
        self._records: tuple[MeasurementRecord, ...] = tuple(kept)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MeasurementRecord]:
        return iter(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> tuple[MeasurementRecord, ...]:
        return self._records

    @cached_property
    def departments(self) -> dict[str, DepartmentAggregate]:
        """Department aggregates, computed on first access."""
        return aggregate_by_department(self._records)

    @property
    def labelled_records(self) -> list[MeasurementRecord]:
        return [r for r in self._records if r.has_label]

    def closest(self, lat: float, lon: float) -> Optional[NearbyRecord]:
        """Return the record nearest to ``(lat, lon)``, or ``None`` if empty.

        Ties keep the earliest record in dataset order.
        """
        best: Optional[NearbyRecord] = None
        for rec in self._records:
            d = degree_distance(lat, lon, rec.lat, rec.lon)
            if best is None or d < best.distance_deg:
                best = NearbyRecord(record=rec, distance_deg=d)
        return best

    def nearby(
        self,
        lat: float,
        lon: float,
        radius_deg: float = 0.1,
        limit: int = 5,
    ) -> list[NearbyRecord]:
        """Records within ``radius_deg`` of the point, nearest first.

        Args:
            lat: Query latitude.
            lon: Query longitude.
            radius_deg: Inclusive search radius in degrees.
            limit: Maximum number of results.
        """
        hits = [
            NearbyRecord(record=rec, distance_deg=d)
            for rec in self._records
            if (d := degree_distance(lat, lon, rec.lat, rec.lon)) <= radius_deg
        ]
        hits.sort(key=lambda h: h.distance_deg)
        return hits[:limit]
