"""
LightGBM random-forest classifier for solar / eolica / hibrida.

Model choice
------------
LightGBM in ``boosting="rf"`` mode is a bootstrap-aggregated ensemble of
independent decision trees: every iteration fits one tree on a bagged row
subsample and a random feature subset, and predictions average the trees.
It gives the forest we need with the same library the rest of the ML layer
is built on, and exposes genuine per-class probabilities.

Hyper-parameter mapping
-----------------------
    n_estimators       → num_iterations          (100 trees)
    max_depth          → max_depth, num_leaves = 2**max_depth
    min_samples_leaf   → min_data_in_leaf
    min_samples_split  → min_data_in_leaf >= ceil(min_samples_split / 2)
                         (LightGBM has no split-size knob; a split whose
                         children each hold that many rows implies a parent
                         of at least min_samples_split rows)
    feature_fraction   → feature_fraction         (80% of features per tree)
    bagging_fraction   → bagging_fraction, bagging_freq = 1

Small data
----------
The balanced set can be a few dozen rows, so histogram binning and the
dataset pre-filter are relaxed (``min_data_in_bin = 1``,
``feature_pre_filter = False``).  Without that LightGBM may silently refuse
every split on tiny datasets.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Sequence

import numpy as np

from renewable_recommender.config import ForestConfig
from renewable_recommender.ml.feature_selector import FEATURE_COLS
from renewable_recommender.taxonomy.technology import CLASS_ORDER

logger = logging.getLogger(__name__)

_LABEL_TO_INDEX: dict[str, int] = {t.value: i for i, t in enumerate(CLASS_ORDER)}


class ForestModel:
    """Thin wrapper around a multiclass LightGBM random-forest booster."""

    MODEL_VERSION = "rf-v0.3.0"

    def __init__(self, config: ForestConfig | None = None) -> None:
        self.config = config or ForestConfig()
        self._booster = None       # lgb.Booster; None until fit()
        self._training_rows: int = 0

    @property
    def is_fitted(self) -> bool:
        return self._booster is not None

    @property
    def training_rows(self) -> int:
        return self._training_rows

    def lgb_params(self) -> dict[str, Any]:
        cfg = self.config
        min_leaf = max(cfg.min_samples_leaf, math.ceil(cfg.min_samples_split / 2))
        return {
            "objective":          "multiclass",
            "num_class":          len(CLASS_ORDER),
            "boosting":           "rf",
            "max_depth":          cfg.max_depth,
            "num_leaves":         2 ** cfg.max_depth,
            "min_data_in_leaf":   min_leaf,
            "min_sum_hessian_in_leaf": 0.0,
            "min_data_in_bin":    1,
            "feature_pre_filter": False,
            "feature_fraction":   cfg.feature_fraction,
            "bagging_fraction":   cfg.bagging_fraction,
            "bagging_freq":       1,
            "seed":               cfg.random_seed,
            "deterministic":      True,
            "num_threads":        1,
            "verbose":            -1,
        }

    def fit(self, features: Sequence[Sequence[float]], labels: Sequence[str]) -> None:
        """Fit the forest on normalised feature rows.

        Args:
            features: Normalised rows in ``FEATURE_COLS`` order.
            labels: Label slugs (``solar`` / ``eolica`` / ``hibrida``).

        Raises:
            ValueError: On empty input, length mismatch or an unknown label.
        """
        import lightgbm as lgb

        if not features:
            raise ValueError("ForestModel.fit() needs at least one training row.")
        if len(features) != len(labels):
            raise ValueError(
                f"features/labels length mismatch: {len(features)} vs {len(labels)}."
            )
        unknown = sorted(set(labels) - set(_LABEL_TO_INDEX))
        if unknown:
            raise ValueError(f"Unknown training label(s): {unknown}.")

        X = np.asarray(features, dtype=np.float64)
        y = np.asarray([_LABEL_TO_INDEX[label] for label in labels], dtype=np.int32)

        params = self.lgb_params()
        dtrain = lgb.Dataset(
            X,
            label=y,
            feature_name=list(FEATURE_COLS),
            params={"min_data_in_bin": 1, "feature_pre_filter": False, "verbose": -1},
            free_raw_data=False,
        )
        self._booster = lgb.train(
            params,
            dtrain,
            num_boost_round=self.config.n_estimators,
        )
        self._training_rows = len(labels)

    def predict_proba(self, features: Sequence[Sequence[float]]) -> np.ndarray:
        """Per-class probabilities, shape ``(n_rows, 3)`` in ``CLASS_ORDER``.

        Raises:
            RuntimeError: If the model has not been fitted.
        """
        if not self.is_fitted:
            raise RuntimeError("Cannot predict with an unfitted ForestModel.")
        X = np.asarray(features, dtype=np.float64)
        proba = np.asarray(self._booster.predict(X), dtype=np.float64)
        return proba.reshape(len(X), len(CLASS_ORDER))

    def predict(self, features: Sequence[Sequence[float]]) -> list[str]:
        """Most probable label per row."""
        proba = self.predict_proba(features)
        return [CLASS_ORDER[int(i)].value for i in np.argmax(proba, axis=1)]
