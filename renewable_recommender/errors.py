"""
Exception taxonomy for the recommendation engine.

Propagation
-----------
``OutOfTerritoryError``, ``DatasetUnavailableError`` and
``NoValidNeighborsError`` reach the caller as explicit failures.

``ModelNotReadyError`` and ``PredictionError`` are internal: the engine
catches them and falls back to the scientific rule classifier.

``EmptyTrainingSetError`` / ``TrainingFailureError`` are captured by
``ForestClassifier.train()`` and reported in a ``TrainingReport``; they are
only raised by the lower-level building blocks.

``MissingParametersError`` is the one error a caller sees when even the
scientific rule cannot run.
"""

from __future__ import annotations


class RecommenderError(Exception):
    """Base class for every domain error raised by this package."""


# ── Territory ─────────────────────────────────────────────────────────────────


class OutOfTerritoryError(RecommenderError):
    """Raised when a coordinate lies outside the supported bounding box.

    Attributes:
        lat: Rejected latitude.
        lon: Rejected longitude.
        reason: Human-readable rejection reason.
    """

    def __init__(self, lat: float, lon: float, reason: str) -> None:
        self.lat = lat
        self.lon = lon
        self.reason = reason
        super().__init__(f"({lat}, {lon}): {reason}")


# ── Interpolation ─────────────────────────────────────────────────────────────


class InterpolationError(RecommenderError):
    """Base class for failures of the spatial interpolator."""


class DatasetUnavailableError(InterpolationError):
    """Raised when interpolation is requested against an empty dataset."""

    def __init__(self) -> None:
        super().__init__("Dataset is empty; IDW interpolation is unavailable.")


class NoValidNeighborsError(InterpolationError):
    """Raised when no record has finite values for every interpolated field."""

    def __init__(self, n_records: int) -> None:
        self.n_records = n_records
        super().__init__(
            f"None of the {n_records} dataset record(s) has complete, finite "
            "environmental values for interpolation."
        )


# ── Training / inference ──────────────────────────────────────────────────────


class TrainingError(RecommenderError):
    """Base class for training failures."""


class EmptyTrainingSetError(TrainingError):
    """Raised when balancing leaves no labelled sample to train on."""

    def __init__(self, n_records: int) -> None:
        self.n_records = n_records
        super().__init__(
            f"No usable labelled samples among {n_records} record(s); "
            "cannot build a training set."
        )


class TrainingFailureError(TrainingError):
    """Raised when the ensemble fit itself fails."""


class ModelNotReadyError(RecommenderError):
    """Raised when prediction is attempted before a successful training run.

    Attributes:
        state: Lifecycle state of the classifier at call time.
    """

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Forest classifier is not ready (state='{state}').")


class PredictionError(RecommenderError):
    """Raised when a ready model fails to produce a prediction."""


# ── Request validation ────────────────────────────────────────────────────────


class MissingParametersError(RecommenderError):
    """Raised when the environmental parameters needed by the rule classifier are absent.

    Attributes:
        missing: Names of the missing parameters.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing environmental parameter(s): {', '.join(self.missing)}."
        )


class InvalidParametersError(RecommenderError, ValueError):
    """Raised when manual simulation input falls outside its physical range."""
