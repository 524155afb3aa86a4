"""
Request, interpolation and recommendation models.

``InterpolationResult`` carries the raw IDW estimates; rounding happens only
in ``InterpolationResult.rounded()`` which is called at the presentation
boundary (CLI output, ``Recommendation.parameters``).

``Recommendation`` is frozen and always carries ``source`` — no answer is
produced without provenance.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from renewable_recommender.models.measurement import is_finite_number


def to_percent(confidence: float) -> int:
    """Confidence in [0, 1] → integer percentage, rounding half up."""
    pct = math.floor(confidence * 100 + 0.5)
    return max(0, min(100, pct))


class RecommendationSource(StrEnum):
    """Where a recommendation came from."""

    DATASET = "Dataset"
    LEARNED_MODEL = "LearnedModel"
    SCIENTIFIC_RULE = "ScientificRule"


class EnvironmentalParams(BaseModel):
    """Environmental inputs for classification; any field may be unknown."""

    model_config = ConfigDict(frozen=True)

    radiation: Optional[float] = None
    wind_speed: Optional[float] = None
    elevation: Optional[float] = None
    temperature: Optional[float] = None

    def missing(self, fields: tuple[str, ...]) -> list[str]:
        """Names in ``fields`` whose value is ``None`` or not a finite number."""
        return [f for f in fields if not is_finite_number(getattr(self, f))]


class NeighborInfo(BaseModel):
    """One dataset record used by an IDW estimate.

    Attributes:
        municipality: Municipality name of the neighbour.
        department: Department name of the neighbour.
        distance_deg: Planar distance in degrees.
        distance_km: ``distance_deg × km_per_degree`` (approximate).
        weight: Normalised IDW weight; weights of one result sum to 1.
    """

    model_config = ConfigDict(frozen=True)

    municipality: str
    department: str
    distance_deg: float
    distance_km: float
    weight: float


class InterpolationMetadata(BaseModel):
    """Provenance of an interpolated parameter set."""

    model_config = ConfigDict(frozen=True)

    method: str = "IDW"
    neighbor_count: int
    nearest_distance_km: float
    nearest_municipality: str
    nearest_department: str
    used_neighbors: tuple[NeighborInfo, ...] = ()


class InterpolationResult(BaseModel):
    """IDW estimate of the four interpolated environmental fields."""

    model_config = ConfigDict(frozen=True)

    radiation: float
    wind_speed: float
    elevation: float
    temperature: float
    metadata: InterpolationMetadata

    def rounded(self) -> "InterpolationResult":
        """Presentation copy.

        Radiation and wind to 2 dp, temperature 1 dp, elevation integer, and
        every distance in km (nearest and per neighbour) to 1 dp.
        """
        meta = self.metadata
        neighbors = tuple(
            n.model_copy(update={"distance_km": round(n.distance_km, 1)})
            for n in meta.used_neighbors
        )
        return self.model_copy(
            update={
                "radiation": round(self.radiation, 2),
                "wind_speed": round(self.wind_speed, 2),
                "temperature": round(self.temperature, 1),
                "elevation": float(round(self.elevation)),
                "metadata": meta.model_copy(
                    update={
                        "nearest_distance_km": round(meta.nearest_distance_km, 1),
                        "used_neighbors": neighbors,
                    }
                ),
            }
        )

    def to_params(self) -> EnvironmentalParams:
        return EnvironmentalParams(
            radiation=self.radiation,
            wind_speed=self.wind_speed,
            elevation=self.elevation,
            temperature=self.temperature,
        )


class RecommendationRequest(BaseModel):
    """Input to ``RecommendationEngine.recommend()``.

    Attributes:
        lat: Latitude, required unless ``manual`` is set.
        lon: Longitude, required unless ``manual`` is set.
        params: Environmental values supplied directly by the caller.
        dataset_label: Ground-truth ``potencial`` label for the point, if any.
        manual: Custom (non-geographic) input; skips the territory check.
        interpolation: Metadata to attach when ``params`` came from IDW.
    """

    model_config = ConfigDict(frozen=True)

    lat: Optional[float] = None
    lon: Optional[float] = None
    params: EnvironmentalParams = EnvironmentalParams()
    dataset_label: Optional[str] = None
    manual: bool = False
    interpolation: Optional[InterpolationMetadata] = None

    @model_validator(mode="after")
    def validate_coordinate_pair(self) -> "RecommendationRequest":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be given together.")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


class Recommendation(BaseModel):
    """Final fused recommendation for one point.

    Attributes:
        technology: ``solar``, ``eolica``, ``hibrida`` (or a dataset label verbatim).
        explanation: Human-readable justification.
        confidence_pct: Integer confidence percentage in [0, 100].
        source: Which fusion strategy produced the answer.
        parameters: Environmental values the decision was based on.
        interpolation: IDW metadata when the parameters were interpolated.
    """

    model_config = ConfigDict(frozen=True)

    technology: str
    explanation: str
    confidence_pct: int = Field(ge=0, le=100)
    source: RecommendationSource
    parameters: EnvironmentalParams = EnvironmentalParams()
    interpolation: Optional[InterpolationMetadata] = None

    @field_validator("technology", "explanation")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty.")
        return v.strip()
