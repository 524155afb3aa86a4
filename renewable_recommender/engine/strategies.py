"""
Fusion strategies — one link each in the recommendation chain.

Each strategy inspects a ``RecommendationRequest`` and returns a tagged
``StrategyOutcome``:

    success : a decision was made; the engine stops here.
    skip    : the strategy does not apply (no label, model not ready, ...).
    error   : the strategy applied but failed; the engine logs a warning
              and moves on.

Default order (first success wins):
    1. DatasetLabelStrategy    — ground truth, confidence 0.95
    2. LearnedModelStrategy    — ForestClassifier, when ready
    3. ScientificRuleStrategy  — threshold rules; the terminal fallback
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Protocol

from renewable_recommender.errors import MissingParametersError
from renewable_recommender.ml.classifier import ForestClassifier
from renewable_recommender.models.recommendation import (
    RecommendationRequest,
    RecommendationSource,
    to_percent,
)
from renewable_recommender.rules.scientific import ScientificClassifier
from renewable_recommender.taxonomy.technology import normalize_label

logger = logging.getLogger(__name__)

# Parameters each strategy needs.
_RULE_FIELDS: tuple[str, ...] = ("radiation", "wind_speed", "elevation")
_MODEL_FIELDS: tuple[str, ...] = ("radiation", "wind_speed", "elevation", "temperature")


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    SKIP = "skip"
    ERROR = "error"


@dataclass(frozen=True)
class Decision:
    """A technology choice before confidence is converted to a percentage."""

    technology: str
    confidence: float
    explanation: str
    source: RecommendationSource


@dataclass(frozen=True)
class StrategyOutcome:
    """Tagged result of one strategy.

    Attributes:
        status: success / skip / error.
        decision: Set only when ``status == success``.
        reason: Why the strategy skipped or failed.
        error: The underlying exception for ``status == error``.
    """

    status: OutcomeStatus
    decision: Optional[Decision] = None
    reason: str = ""
    error: Optional[Exception] = None

    @classmethod
    def success(cls, decision: Decision) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.SUCCESS, decision=decision)

    @classmethod
    def skip(cls, reason: str) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.SKIP, reason=reason)

    @classmethod
    def failed(cls, error: Exception) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.ERROR, reason=str(error), error=error)


class FusionStrategy(Protocol):
    """Interface of one link in the fusion chain."""

    name: str

    def evaluate(self, request: RecommendationRequest) -> StrategyOutcome:
        ...


class DatasetLabelStrategy:
    """Use the dataset's ground-truth label verbatim (normalised spelling)."""

    name = "dataset_label"

    def __init__(self, confidence: float = 0.95) -> None:
        self.confidence = confidence

    def evaluate(self, request: RecommendationRequest) -> StrategyOutcome:
        label = normalize_label(request.dataset_label)
        if label is None:
            return StrategyOutcome.skip("no dataset label")

        p = request.params
        measured = []
        if p.radiation is not None:
            measured.append(f"radiation {p.radiation:.1f} kWh/m²/day")
        if p.wind_speed is not None:
            measured.append(f"wind {p.wind_speed:.1f} m/s")
        suffix = f" Recorded {', '.join(measured)}." if measured else ""
        return StrategyOutcome.success(
            Decision(
                technology=label,
                confidence=self.confidence,
                explanation=f"Dataset: {label}.{suffix}",
                source=RecommendationSource.DATASET,
            )
        )


class LearnedModelStrategy:
    """Ask the forest classifier, if it is ready and the inputs are complete."""

    name = "learned_model"

    def __init__(self, classifier: ForestClassifier) -> None:
        self.classifier = classifier

    def evaluate(self, request: RecommendationRequest) -> StrategyOutcome:
        if not self.classifier.is_ready:
            return StrategyOutcome.skip(f"model not ready ({self.classifier.state.value})")
        if not request.has_coordinates:
            return StrategyOutcome.skip("no coordinates for location features")
        missing = request.params.missing(_MODEL_FIELDS)
        if missing:
            return StrategyOutcome.skip(f"missing model inputs: {', '.join(missing)}")

        p = request.params
        try:
            prediction = self.classifier.predict(
                radiation=p.radiation,
                wind_speed=p.wind_speed,
                elevation=p.elevation,
                temperature=p.temperature,
                lat=request.lat,
                lon=request.lon,
            )
        except Exception as exc:
            return StrategyOutcome.failed(exc)

        pct = to_percent(prediction.confidence)
        return StrategyOutcome.success(
            Decision(
                technology=prediction.technology.value,
                confidence=prediction.confidence,
                explanation=(
                    f"{prediction.technology.value.capitalize()} generation is recommended "
                    f"from patterns learned across similar sites in the territory; the "
                    f"environmental parameters support this with {pct}% confidence."
                ),
                source=RecommendationSource.LEARNED_MODEL,
            )
        )


class ScientificRuleStrategy:
    """Terminal fallback: deterministic threshold classification."""

    name = "scientific_rule"

    def __init__(self, classifier: ScientificClassifier) -> None:
        self.classifier = classifier

    def evaluate(self, request: RecommendationRequest) -> StrategyOutcome:
        missing = request.params.missing(_RULE_FIELDS)
        if missing:
            return StrategyOutcome.failed(MissingParametersError(missing))

        p = request.params
        result = self.classifier.classify(p.radiation, p.wind_speed, p.elevation)
        return StrategyOutcome.success(
            Decision(
                technology=result.technology.value,
                confidence=result.confidence,
                explanation=result.explanation,
                source=RecommendationSource.SCIENTIFIC_RULE,
            )
        )
