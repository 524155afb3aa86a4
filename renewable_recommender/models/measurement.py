"""
Measurement records — one row of the renewable-potential dataset.

``MeasurementRecord`` is created once when the dataset is loaded and never
mutated afterwards (frozen model).  Environmental values may be ``None`` or
NaN when the source cell was empty or unparsable; such records are kept in
the dataset (they still have a location and may carry a label) but are
excluded from interpolation and training via ``has_complete_environment``.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict

from renewable_recommender.taxonomy.technology import is_ground_truth_label, normalize_label

# Fields every record must have as finite numbers to take part in IDW / training.
CORE_ENVIRONMENT_FIELDS: tuple[str, ...] = ("radiation", "wind_speed", "elevation", "temperature")


def is_finite_number(value: Optional[float]) -> bool:
    """True for real, finite numbers (rejects None, NaN, ±inf and bools)."""
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


class EnvironmentalReading(BaseModel):
    """Environmental measurements for one municipality.

    Attributes:
        radiation: Daily global horizontal irradiation in kWh/m²/day.
        wind_speed: Mean wind speed in m/s.
        elevation: Altitude above sea level in metres.
        temperature: Mean air temperature in °C.
        humidity: Mean relative humidity in %.
        cloud_cover: Mean cloud cover in %.
    """

    model_config = ConfigDict(frozen=True)

    radiation: Optional[float] = None
    wind_speed: Optional[float] = None
    elevation: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    cloud_cover: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        """True when every core field is a finite number."""
        return all(is_finite_number(getattr(self, f)) for f in CORE_ENVIRONMENT_FIELDS)


class MeasurementRecord(BaseModel):
    """One dataset row: location, administrative unit, environment, label.

    Attributes:
        department: Department name (``departamento``).
        municipality: Municipality name (``municipio``).
        dane_code: DANE municipality code, kept as text (leading zeros matter).
        lat: Latitude in decimal degrees.
        lon: Longitude in decimal degrees.
        environment: Environmental measurements.
        grid_type: Grid connection type (``tipo_red``), free text.
        demand: Monthly demand in kWh.
        relief_index: Terrain relief index.
        potential: Raw ``potencial`` label as written in the dataset.
    """

    model_config = ConfigDict(frozen=True)

    department: str = ""
    municipality: str = ""
    dane_code: str = ""
    lat: float
    lon: float
    environment: EnvironmentalReading = EnvironmentalReading()
    grid_type: Optional[str] = None
    demand: Optional[float] = None
    relief_index: Optional[float] = None
    potential: Optional[str] = None

    @property
    def has_valid_location(self) -> bool:
        return is_finite_number(self.lat) and is_finite_number(self.lon)

    @property
    def has_complete_environment(self) -> bool:
        return self.environment.is_complete

    @property
    def has_label(self) -> bool:
        """True when ``potential`` is a usable ground-truth label."""
        return is_ground_truth_label(self.potential)

    @property
    def label(self) -> Optional[str]:
        """Normalised label slug, or ``None`` when the record has no ground truth."""
        return normalize_label(self.potential)
