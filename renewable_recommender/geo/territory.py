"""
Territory validation for the supported region.

The bounding box covers mainland Colombia plus the San Andrés and
Providencia archipelago.  It is a fixed compatibility constant, not a config
value: recommendations are only meaningful where the dataset has coverage.

Validation fails closed — any non-finite coordinate is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from renewable_recommender.errors import OutOfTerritoryError
from renewable_recommender.models.measurement import is_finite_number

LAT_MIN = -5.0
LAT_MAX = 14.0
LON_MIN = -85.0
LON_MAX = -66.0

OUT_OF_TERRITORY_REASON = "Locations outside the Colombian territory cannot be evaluated."


@dataclass(frozen=True)
class TerritoryCheck:
    """Outcome of a territory check.

    Attributes:
        valid: True when the coordinate lies inside the bounding box.
        reason: Rejection reason, ``None`` when valid.
    """

    valid: bool
    reason: Optional[str] = None


def validate_territory(lat: float, lon: float) -> TerritoryCheck:
    """Check ``(lat, lon)`` against the inclusive bounding box. No side effects."""
    if not (is_finite_number(lat) and is_finite_number(lon)):
        return TerritoryCheck(valid=False, reason="Coordinates must be finite numbers.")
    if lat < LAT_MIN or lat > LAT_MAX or lon < LON_MIN or lon > LON_MAX:
        return TerritoryCheck(valid=False, reason=OUT_OF_TERRITORY_REASON)
    return TerritoryCheck(valid=True)


def require_territory(lat: float, lon: float) -> None:
    """Raise ``OutOfTerritoryError`` unless ``(lat, lon)`` is inside the box."""
    check = validate_territory(lat, lon)
    if not check.valid:
        raise OutOfTerritoryError(lat, lon, check.reason or OUT_OF_TERRITORY_REASON)
