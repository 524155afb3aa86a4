"""
ForestClassifier — the single shared learned-model service.

Lifecycle
---------
    untrained ──train()──▶ training ──success──▶ ready
                               └──────failure──▶ failed
    any state except training ──reset()──▶ untrained

``train()`` is not reentrant: a call made while another training run is in
flight is rejected (``TrainingReport.rejected = True``) rather than
interleaved.  Training failure never raises; it is reported through the
returned ``TrainingReport`` and the engine keeps working with the rule
classifier.

Concurrency
-----------
One writer (training), many readers (``predict()``).  The fitted model and
its ``Scaler`` are bundled in an immutable ``_TrainedState`` and published
with a single reference assignment under ``_lock`` once the fit has
completed.  Readers take one snapshot of that reference and never see a
half-built model, so prediction needs no lock.

Training steps
--------------
1. Keep records with a ground-truth label and complete environment.
2. Fit the ``Scaler`` on that labelled subset.
3. Normalise and bucket by label.
4. Balance (``ml.balancing``) with the seeded generator.
5. Raise ``EmptyTrainingSetError`` (captured) if nothing is left.
6. Fit the LightGBM random forest.
7. Publish the new state and mark ``ready``.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable, Optional, Sequence

import numpy as np

from renewable_recommender.config import ForestConfig
from renewable_recommender.errors import (
    EmptyTrainingSetError,
    ModelNotReadyError,
    PredictionError,
    TrainingFailureError,
)
from renewable_recommender.ml.balancing import BalancedSet, balance
from renewable_recommender.ml.feature_selector import (
    FEATURE_COLS,
    Scaler,
    fit_scaler,
    raw_features,
)
from renewable_recommender.ml.forest_model import ForestModel
from renewable_recommender.ml.heuristics import estimate_probabilities
from renewable_recommender.models.measurement import MeasurementRecord, is_finite_number
from renewable_recommender.taxonomy.technology import CLASS_ORDER, Technology, to_technology

logger = logging.getLogger(__name__)


class ClassifierState(StrEnum):
    """Lifecycle state of the forest classifier."""

    UNTRAINED = "untrained"
    TRAINING = "training"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class TrainingReport:
    """Outcome of one ``train()`` call.

    Attributes:
        success: True when the model is now ready.
        state: Classifier state after the call.
        n_records: Records passed in.
        n_labelled: Records with a usable label and complete environment.
        n_samples: Rows in the balanced training set.
        class_counts: Per-class row counts after balancing.
        training_accuracy: Accuracy on the balanced training rows (sanity check only).
        rejected: True when the call was refused because training was in flight.
        error: Failure description, ``None`` on success.
    """

    success: bool
    state: ClassifierState
    n_records: int = 0
    n_labelled: int = 0
    n_samples: int = 0
    class_counts: dict[str, int] = field(default_factory=dict)
    training_accuracy: Optional[float] = None
    rejected: bool = False
    error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.success


@dataclass(frozen=True)
class Prediction:
    """Forest prediction for one point.

    Attributes:
        technology: Most probable class.
        confidence: Max class probability under the active confidence method.
        probabilities: Class slug → probability (sums to 1 unless all zero).
        confidence_method: ``"ensemble"`` or ``"heuristic"``.
    """

    technology: Technology
    confidence: float
    probabilities: dict[str, float]
    confidence_method: str


@dataclass(frozen=True)
class ModelStats:
    """Read-only snapshot of the classifier for status displays."""

    state: ClassifierState
    is_ready: bool
    features: tuple[str, ...]
    classes: tuple[str, ...]
    has_scaler: bool
    n_samples: int
    class_counts: dict[str, int]
    training_accuracy: Optional[float]


@dataclass(frozen=True)
class _TrainedState:
    model: ForestModel
    scaler: Scaler
    n_samples: int
    class_counts: dict[str, int]
    training_accuracy: float


class ForestClassifier:
    """Trainable solar / eolica / hibrida classifier with a readiness gate.

    Args:
        config: Forest hyper-parameters, balancing cap and random seed.
    """

    def __init__(self, config: ForestConfig | None = None) -> None:
        self.config = config or ForestConfig()
        self._lock = threading.Lock()
        self._state = ClassifierState.UNTRAINED
        self._trained: Optional[_TrainedState] = None

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def state(self) -> ClassifierState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == ClassifierState.READY and self._trained is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def reset(self) -> bool:
        """Discard model and scaler and return to ``untrained``.

        Returns:
            False (and does nothing) while a training run is in flight.
        """
        with self._lock:
            if self._state == ClassifierState.TRAINING:
                logger.warning("reset() ignored: training in progress.")
                return False
            self._trained = None
            self._state = ClassifierState.UNTRAINED
        logger.info("Forest classifier reset.")
        return True

    def train(self, records: Iterable[MeasurementRecord]) -> TrainingReport:
        """Train on labelled records; never raises.

        Args:
            records: Dataset records (unlabelled / incomplete ones are skipped).

        Returns:
            ``TrainingReport``; ``report.ready`` tells whether the model is usable.
        """
        with self._lock:
            if self._state == ClassifierState.TRAINING:
                logger.warning("train() rejected: another training run is in progress.")
                return TrainingReport(
                    success=False,
                    state=ClassifierState.TRAINING,
                    rejected=True,
                    error="Training already in progress.",
                )
            self._state = ClassifierState.TRAINING

        # Everything after the TRAINING transition must publish FAILED on error,
        # including reading the input iterable.
        materialized: list[MeasurementRecord] = []
        labelled: list[MeasurementRecord] = []
        try:
            materialized.extend(records)
            labelled = select_training_records(materialized)
            trained = self._fit(labelled, n_records=len(materialized))
        except Exception as exc:
            with self._lock:
                self._trained = None
                self._state = ClassifierState.FAILED
            logger.error("Forest training failed: %s", exc)
            return TrainingReport(
                success=False,
                state=ClassifierState.FAILED,
                n_records=len(materialized),
                n_labelled=len(labelled),
                error=str(exc),
            )

        with self._lock:
            self._trained = trained
            self._state = ClassifierState.READY

        logger.info(
            "Forest trained: %d labelled record(s) → %d balanced sample(s) %s, "
            "training accuracy %.2f",
            len(labelled), trained.n_samples, trained.class_counts,
            trained.training_accuracy,
        )
        return TrainingReport(
            success=True,
            state=ClassifierState.READY,
            n_records=len(materialized),
            n_labelled=len(labelled),
            n_samples=trained.n_samples,
            class_counts=dict(trained.class_counts),
            training_accuracy=trained.training_accuracy,
        )

    def _fit(self, labelled: list[MeasurementRecord], n_records: int) -> _TrainedState:
        """Build scaler + balanced set and fit a fresh model (no shared state touched)."""
        if not labelled:
            raise EmptyTrainingSetError(n_records)

        raw_rows = [raw_features(r) for r in labelled]
        scaler = fit_scaler(raw_rows)

        groups: dict[str, list[list[float]]] = {t.value: [] for t in CLASS_ORDER}
        for rec, raw in zip(labelled, raw_rows):
            groups[rec.label].append(scaler.transform(raw))

        rng = np.random.default_rng(self.config.random_seed)
        balanced: BalancedSet = balance(groups, rng, cap=self.config.max_samples_cap)
        if len(balanced) == 0:
            raise EmptyTrainingSetError(n_records)

        model = ForestModel(self.config)
        try:
            model.fit(balanced.features, balanced.labels)
        except Exception as exc:
            raise TrainingFailureError(f"Ensemble fit failed: {exc}") from exc

        predicted = model.predict(balanced.features)
        correct = sum(p == t for p, t in zip(predicted, balanced.labels))

        return _TrainedState(
            model=model,
            scaler=scaler,
            n_samples=len(balanced),
            class_counts=balanced.class_counts(),
            training_accuracy=correct / len(balanced),
        )

    # ── Inference ─────────────────────────────────────────────────────────────

    def predict(
        self,
        radiation: float,
        wind_speed: float,
        elevation: float,
        temperature: float,
        lat: float,
        lon: float,
    ) -> Prediction:
        """Predict the technology for one raw parameter set.

        Raises:
            ModelNotReadyError: If the classifier is not ``ready``.
            PredictionError: If inputs are non-finite or the model fails.
        """
        trained = self._trained
        if self._state != ClassifierState.READY or trained is None:
            raise ModelNotReadyError(self._state.value)

        raw = [radiation, wind_speed, elevation, temperature, lat, lon]
        if not all(is_finite_number(v) for v in raw):
            raise PredictionError(f"Non-finite feature value in {dict(zip(FEATURE_COLS, raw))}.")

        normalized = trained.scaler.transform(raw)
        try:
            proba_row = trained.model.predict_proba([normalized])[0]
        except Exception as exc:
            raise PredictionError(f"Forest inference failed: {exc}") from exc

        label = CLASS_ORDER[int(np.argmax(proba_row))]
        probabilities, method = self._confidence_probabilities(proba_row, normalized)
        return Prediction(
            technology=label,
            confidence=max(probabilities.values()),
            probabilities=probabilities,
            confidence_method=method,
        )

    def _confidence_probabilities(
        self, proba_row: Sequence[float], normalized: Sequence[float]
    ) -> tuple[dict[str, float], str]:
        if self.config.confidence_method == "ensemble":
            values = [float(p) for p in proba_row]
            if all(math.isfinite(p) for p in values) and sum(values) > 0:
                total = sum(values)
                return (
                    {t.value: p / total for t, p in zip(CLASS_ORDER, values)},
                    "ensemble",
                )
            logger.debug("Ensemble probabilities unusable; using heuristic estimate.")
        return estimate_probabilities(normalized), "heuristic"

    # ── Introspection ─────────────────────────────────────────────────────────

    def stats(self) -> ModelStats:
        trained = self._trained
        return ModelStats(
            state=self._state,
            is_ready=self.is_ready,
            features=FEATURE_COLS,
            classes=tuple(t.value for t in CLASS_ORDER),
            has_scaler=trained is not None,
            n_samples=trained.n_samples if trained else 0,
            class_counts=dict(trained.class_counts) if trained else {},
            training_accuracy=trained.training_accuracy if trained else None,
        )


def select_training_records(records: Iterable[MeasurementRecord]) -> list[MeasurementRecord]:
    """Records usable for training: recognised label + complete environment.

    Labels outside solar / eolica / hibrida are skipped rather than coerced.
    """
    selected: list[MeasurementRecord] = []
    unrecognised = 0
    for rec in records:
        if not rec.has_label or not rec.has_complete_environment:
            continue
        if to_technology(rec.potential) is None:
            unrecognised += 1
            continue
        selected.append(rec)
    if unrecognised:
        logger.warning("Skipped %d record(s) with an unrecognised label.", unrecognised)
    return selected
