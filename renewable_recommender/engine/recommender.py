"""
RecommendationEngine — the public service object.

Wiring
------
The engine owns exactly one ``ForestClassifier`` (passed in or created from
config) and holds a read-only reference to the ``Dataset``.  Nothing here is
module-level state: whoever builds the engine owns its lifecycle.

Flow for a coordinate (``recommend_at``)
----------------------------------------
    1. Territory check            → OutOfTerritoryError
    2. Resolve parameters:
         a. dataset record within ``snap_radius_deg`` (≈5 km) with complete
            values → its measurements and its label
         b. otherwise IDW interpolation (no label)
    3. Fusion chain (``recommend``)

Fusion chain (``recommend``)
----------------------------
    1. Dataset label          → source Dataset, confidence 0.95
    2. Forest classifier      → source LearnedModel (if ready)
    3. Scientific rules       → source ScientificRule

Model errors in step 2 are logged and recovered; the caller only sees an
error when step 3 cannot run (``MissingParametersError``).  Manual requests
(``manual=True``) skip the territory check because they describe a
hypothetical site rather than a place on the map.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from renewable_recommender.config import AppConfig
from renewable_recommender.engine.strategies import (
    DatasetLabelStrategy,
    FusionStrategy,
    LearnedModelStrategy,
    OutcomeStatus,
    ScientificRuleStrategy,
)
from renewable_recommender.errors import (
    InterpolationError,
    InvalidParametersError,
    MissingParametersError,
    RecommenderError,
)
from renewable_recommender.geo.interpolation import SpatialInterpolator
from renewable_recommender.geo.territory import TerritoryCheck, require_territory, validate_territory
from renewable_recommender.ml.classifier import ForestClassifier, ModelStats, TrainingReport
from renewable_recommender.models.dataset import Dataset
from renewable_recommender.models.measurement import MeasurementRecord, is_finite_number
from renewable_recommender.models.recommendation import (
    EnvironmentalParams,
    InterpolationResult,
    Recommendation,
    RecommendationRequest,
    to_percent,
)
from renewable_recommender.rules.scientific import ScientificClassifier
from renewable_recommender.taxonomy.technology import is_ground_truth_label

logger = logging.getLogger(__name__)

# Physical input ranges accepted for manual simulation (inclusive).
SIMULATION_RANGES: dict[str, tuple[float, float]] = {
    "radiation":   (0.0, 10.0),      # kWh/m²/day
    "wind_speed":  (0.0, 50.0),      # m/s
    "elevation":   (-500.0, 6000.0), # m
    "temperature": (-10.0, 50.0),    # °C
}


class RecommendationEngine:
    """Fuses dataset labels, the forest classifier and scientific rules.

    Args:
        config: Application configuration.
        dataset: Measurement dataset (empty by default).
        classifier: Shared forest classifier; one is created from
            ``config.forest`` when omitted.
        strategies: Custom fusion chain; defaults to label → model → rules.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        dataset: Dataset | None = None,
        classifier: ForestClassifier | None = None,
        strategies: Sequence[FusionStrategy] | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.dataset = dataset if dataset is not None else Dataset()
        self.classifier = classifier or ForestClassifier(self.config.forest)
        self.interpolator = SpatialInterpolator(self.config.interpolation)
        self.scientific = ScientificClassifier(self.config.scientific)
        self.strategies: tuple[FusionStrategy, ...] = tuple(
            strategies
            if strategies is not None
            else (
                DatasetLabelStrategy(self.config.recommendation.dataset_confidence),
                LearnedModelStrategy(self.classifier),
                ScientificRuleStrategy(self.scientific),
            )
        )

    # ── Territory / interpolation ─────────────────────────────────────────────

    def validate_territory(self, lat: float, lon: float) -> TerritoryCheck:
        return validate_territory(lat, lon)

    def interpolate(self, lat: float, lon: float) -> InterpolationResult:
        """IDW estimate at a coordinate inside the territory.

        Raises:
            OutOfTerritoryError: Coordinate outside the bounding box.
            DatasetUnavailableError: The dataset is empty.
            NoValidNeighborsError: No record has complete values.
        """
        require_territory(lat, lon)
        return self.interpolator.interpolate(lat, lon, self.dataset.records)

    # ── Training ──────────────────────────────────────────────────────────────

    def train(self, records: Iterable[MeasurementRecord] | None = None) -> TrainingReport:
        """Train the shared classifier (on the engine's dataset by default).

        Never raises; inspect ``TrainingReport.ready``.
        """
        source = self.dataset.records if records is None else records
        report = self.classifier.train(source)
        if not report.ready and not report.rejected:
            logger.warning(
                "Forest classifier unavailable (%s); recommendations will use "
                "the scientific rules.",
                report.error,
            )
        return report

    def model_stats(self) -> ModelStats:
        return self.classifier.stats()

    # ── Recommendation ────────────────────────────────────────────────────────

    def recommend(self, request: RecommendationRequest) -> Recommendation:
        """Run the fusion chain for one request.

        Non-manual requests must carry coordinates inside the territory.  When
        some rule inputs are missing and coordinates are known, the missing
        values are filled by IDW interpolation.

        Raises:
            OutOfTerritoryError: Non-manual request outside the territory.
            MissingParametersError: No way to obtain the rule inputs.
            InterpolationError: Filling parameters by IDW failed.
        """
        if not request.manual:
            if not request.has_coordinates:
                raise MissingParametersError(["lat", "lon"])
            require_territory(request.lat, request.lon)
            request = self._fill_missing_params(request)

        for strategy in self.strategies:
            outcome = strategy.evaluate(request)
            if outcome.status == OutcomeStatus.SUCCESS:
                decision = outcome.decision
                logger.debug(
                    "Strategy %s chose %s (%.2f)",
                    strategy.name, decision.technology, decision.confidence,
                )
                return Recommendation(
                    technology=decision.technology,
                    explanation=decision.explanation,
                    confidence_pct=to_percent(decision.confidence),
                    source=decision.source,
                    parameters=request.params,
                    interpolation=request.interpolation,
                )
            if outcome.status == OutcomeStatus.ERROR:
                if strategy is self.strategies[-1] and isinstance(outcome.error, RecommenderError):
                    raise outcome.error
                logger.warning(
                    "Strategy %s failed, falling back: %s", strategy.name, outcome.reason
                )
            else:
                logger.debug("Strategy %s skipped: %s", strategy.name, outcome.reason)

        raise MissingParametersError(["radiation", "wind_speed", "elevation"])

    def _fill_missing_params(self, request: RecommendationRequest) -> RecommendationRequest:
        params = request.params
        missing = params.missing(("radiation", "wind_speed", "elevation", "temperature"))
        if not missing:
            return request
        try:
            estimate = self.interpolator.interpolate(
                request.lat, request.lon, self.dataset.records
            )
        except InterpolationError:
            # A dataset label or complete rule inputs still allow a decision.
            if is_ground_truth_label(request.dataset_label) or not params.missing(
                ("radiation", "wind_speed", "elevation")
            ):
                return request
            raise
        shown = estimate.rounded()
        filled = params.model_copy(update={name: getattr(shown, name) for name in missing})
        return request.model_copy(
            update={"params": filled, "interpolation": shown.metadata}
        )

    def recommend_at(self, lat: float, lon: float) -> Recommendation:
        """Recommend for a map coordinate (direct record or IDW estimate).

        Raises:
            OutOfTerritoryError: Coordinate outside the bounding box.
            DatasetUnavailableError / NoValidNeighborsError: IDW impossible.
        """
        require_territory(lat, lon)

        record = self._snap_to_record(lat, lon)
        if record is not None:
            env = record.environment
            request = RecommendationRequest(
                lat=record.lat,
                lon=record.lon,
                params=EnvironmentalParams(
                    radiation=env.radiation,
                    wind_speed=env.wind_speed,
                    elevation=env.elevation,
                    temperature=env.temperature,
                ),
                dataset_label=record.potential,
            )
            logger.debug("(%.4f, %.4f) resolved to record %s", lat, lon, record.municipality)
            return self.recommend(request)

        estimate = self.interpolator.interpolate(lat, lon, self.dataset.records)
        shown = estimate.rounded()
        request = RecommendationRequest(
            lat=lat,
            lon=lon,
            params=shown.to_params(),
            dataset_label=None,
            interpolation=shown.metadata,
        )
        return self.recommend(request)

    def _snap_to_record(self, lat: float, lon: float) -> Optional[MeasurementRecord]:
        hit = self.dataset.closest(lat, lon)
        if hit is None or hit.distance_deg >= self.config.interpolation.snap_radius_deg:
            return None
        if not hit.record.has_complete_environment:
            return None
        return hit.record

    def simulate(
        self,
        radiation: float,
        wind_speed: float,
        elevation: float,
        temperature: float,
    ) -> Recommendation:
        """Recommend for manually entered values (no location, no territory check).

        Raises:
            InvalidParametersError: A value is non-finite or outside ``SIMULATION_RANGES``.
        """
        values = {
            "radiation": radiation,
            "wind_speed": wind_speed,
            "elevation": elevation,
            "temperature": temperature,
        }
        for name, value in values.items():
            low, high = SIMULATION_RANGES[name]
            if not is_finite_number(value) or not low <= value <= high:
                raise InvalidParametersError(
                    f"{name} must be between {low:g} and {high:g}, got {value}."
                )
        request = RecommendationRequest(params=EnvironmentalParams(**values), manual=True)
        return self.recommend(request)
