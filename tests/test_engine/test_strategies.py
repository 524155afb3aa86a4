"""
Tests for renewable_recommender.engine.strategies.

What we test
------------
DatasetLabelStrategy:
  - Skips without a label or with a "no data" label.
  - Normalises accents / case and reports source Dataset at 0.95.

LearnedModelStrategy:
  - Skips while the classifier is not ready.
  - Skips without coordinates or with incomplete model inputs.
  - Returns an error outcome when the classifier raises, whatever the
    exception type.

ScientificRuleStrategy:
  - Succeeds with the three rule inputs.
  - Returns an error outcome carrying MissingParametersError otherwise.
"""

from __future__ import annotations

import pytest

from renewable_recommender.engine.strategies import (
    DatasetLabelStrategy,
    LearnedModelStrategy,
    OutcomeStatus,
    ScientificRuleStrategy,
)
from renewable_recommender.errors import MissingParametersError, PredictionError
from renewable_recommender.ml.classifier import ClassifierState, ForestClassifier
from renewable_recommender.models.recommendation import (
    EnvironmentalParams,
    RecommendationRequest,
    RecommendationSource,
)
from renewable_recommender.rules.scientific import ScientificClassifier


_FULL_PARAMS = EnvironmentalParams(radiation=5.0, wind_speed=2.0, elevation=100.0, temperature=27.0)


class _BrokenClassifier:
    """Claims readiness but fails on every prediction."""

    state = ClassifierState.READY
    is_ready = True

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or PredictionError("corrupt model")

    def predict(self, **kwargs):
        raise self.error


# ── DatasetLabelStrategy ──────────────────────────────────────────────────────

@pytest.mark.parametrize("label", [None, "", "  ", "Desconocido", "sin datos", "UNKNOWN"])
def test_label_strategy_skips_without_label(label):
    request = RecommendationRequest(lat=4.0, lon=-74.0, dataset_label=label)
    outcome = DatasetLabelStrategy().evaluate(request)
    assert outcome.status == OutcomeStatus.SKIP


@pytest.mark.parametrize("raw,expected", [
    ("Solar", "solar"),
    ("Eólica", "eolica"),
    ("HÍBRIDA", "hibrida"),
])
def test_label_strategy_normalises_label(raw, expected):
    request = RecommendationRequest(lat=4.0, lon=-74.0, params=_FULL_PARAMS, dataset_label=raw)
    outcome = DatasetLabelStrategy().evaluate(request)

    assert outcome.status == OutcomeStatus.SUCCESS
    assert outcome.decision.technology == expected
    assert outcome.decision.confidence == 0.95
    assert outcome.decision.source == RecommendationSource.DATASET
    assert "5.0 kWh" in outcome.decision.explanation


# ── LearnedModelStrategy ──────────────────────────────────────────────────────

def test_model_strategy_skips_when_untrained():
    request = RecommendationRequest(lat=4.0, lon=-74.0, params=_FULL_PARAMS)
    outcome = LearnedModelStrategy(ForestClassifier()).evaluate(request)
    assert outcome.status == OutcomeStatus.SKIP
    assert "untrained" in outcome.reason


def test_model_strategy_skips_without_coordinates():
    request = RecommendationRequest(params=_FULL_PARAMS, manual=True)
    outcome = LearnedModelStrategy(_BrokenClassifier()).evaluate(request)
    assert outcome.status == OutcomeStatus.SKIP


def test_model_strategy_skips_with_missing_temperature():
    params = EnvironmentalParams(radiation=5.0, wind_speed=2.0, elevation=100.0)
    request = RecommendationRequest(lat=4.0, lon=-74.0, params=params)
    outcome = LearnedModelStrategy(_BrokenClassifier()).evaluate(request)
    assert outcome.status == OutcomeStatus.SKIP
    assert "temperature" in outcome.reason


def test_model_strategy_reports_prediction_error():
    request = RecommendationRequest(lat=4.0, lon=-74.0, params=_FULL_PARAMS)
    outcome = LearnedModelStrategy(_BrokenClassifier()).evaluate(request)
    assert outcome.status == OutcomeStatus.ERROR
    assert isinstance(outcome.error, PredictionError)


def test_model_strategy_wraps_unexpected_exception():
    request = RecommendationRequest(lat=4.0, lon=-74.0, params=_FULL_PARAMS)
    boom = RuntimeError("booster handle freed")
    outcome = LearnedModelStrategy(_BrokenClassifier(boom)).evaluate(request)

    assert outcome.status == OutcomeStatus.ERROR
    assert outcome.error is boom
    assert "booster handle freed" in outcome.reason


def test_model_strategy_success_with_trained_classifier(config, training_dataset):
    clf = ForestClassifier(config.forest)
    clf.train(training_dataset.records)

    params = EnvironmentalParams(radiation=5.4, wind_speed=1.5, elevation=1200.0, temperature=20.0)
    request = RecommendationRequest(lat=4.0, lon=-75.0, params=params)
    outcome = LearnedModelStrategy(clf).evaluate(request)

    assert outcome.status == OutcomeStatus.SUCCESS
    assert outcome.decision.source == RecommendationSource.LEARNED_MODEL
    assert 0.0 < outcome.decision.confidence <= 1.0


# ── ScientificRuleStrategy ────────────────────────────────────────────────────

def test_rule_strategy_success():
    request = RecommendationRequest(params=_FULL_PARAMS, manual=True)
    outcome = ScientificRuleStrategy(ScientificClassifier()).evaluate(request)

    assert outcome.status == OutcomeStatus.SUCCESS
    assert outcome.decision.technology == "solar"
    assert outcome.decision.source == RecommendationSource.SCIENTIFIC_RULE


def test_rule_strategy_missing_inputs():
    params = EnvironmentalParams(radiation=5.0)
    request = RecommendationRequest(params=params, manual=True)
    outcome = ScientificRuleStrategy(ScientificClassifier()).evaluate(request)

    assert outcome.status == OutcomeStatus.ERROR
    assert isinstance(outcome.error, MissingParametersError)
    assert outcome.error.missing == ["wind_speed", "elevation"]
