"""
Heuristic class probabilities for the forest classifier.

Uncertainty note
----------------
These probabilities are HEURISTIC, not model-derived.  They come from the
normalised radiation / wind / elevation features only and do NOT reflect the
ensemble's per-class output.  The classifier prefers the ensemble's own
class probabilities (``confidence_method = "ensemble"``) and falls back to
this module when configured with ``confidence_method = "heuristic"`` or when
the ensemble output is unusable (non-finite or all zero).

Formula (on min-max normalised features r, w, e)
------------------------------------------------
    p_solar   ∝ max(0, 0.8·r + 0.2·(1 − w))
    p_eolica  ∝ max(0, 0.8·w + 0.2·e)
    p_hibrida ∝ max(0, 1.2·min(r, w))

renormalised to sum to 1.  If every term is 0 the raw zeros are returned.
"""

from __future__ import annotations

from typing import Sequence

from renewable_recommender.ml.feature_selector import FEATURE_INDEX
from renewable_recommender.taxonomy.technology import Technology


def estimate_probabilities(normalized: Sequence[float]) -> dict[str, float]:
    """Heuristic per-class probabilities from one normalised feature row."""
    r = normalized[FEATURE_INDEX["radiation"]]
    w = normalized[FEATURE_INDEX["wind_speed"]]
    e = normalized[FEATURE_INDEX["elevation"]]

    p_solar = max(0.0, r * 0.8 + (1.0 - w) * 0.2)
    p_wind = max(0.0, w * 0.8 + e * 0.2)
    p_hybrid = max(0.0, min(r, w) * 1.2)

    total = p_solar + p_wind + p_hybrid
    if total > 0:
        p_solar /= total
        p_wind /= total
        p_hybrid /= total

    return {
        Technology.SOLAR.value: p_solar,
        Technology.WIND.value: p_wind,
        Technology.HYBRID.value: p_hybrid,
    }
