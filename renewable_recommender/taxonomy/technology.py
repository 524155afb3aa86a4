"""
Renewable technology taxonomy and dataset label normalisation.

The dataset's ``potencial`` column is free text: case varies and accents are
optional (``Eólica``, ``eolica``, ``EOLICA``).  ``normalize_label()`` is the
single place that folds those spellings into the canonical slugs below, and
``is_ground_truth_label()`` decides whether a value counts as a real label.

This module has NO imports from any other ``renewable_recommender`` package.
"""

from __future__ import annotations

import unicodedata
from enum import StrEnum
from typing import Optional


class Technology(StrEnum):
    """Recommendable generation technology."""

    SOLAR = "solar"
    """Photovoltaic generation."""

    WIND = "eolica"
    """Wind turbine generation."""

    HYBRID = "hibrida"
    """Combined solar + wind installation."""


# Label order used by the classifier (class index → Technology).
CLASS_ORDER: tuple[Technology, ...] = (Technology.SOLAR, Technology.WIND, Technology.HYBRID)

# Values meaning "no ground truth for this record".
NO_DATA_LABELS: frozenset[str] = frozenset({"", "desconocido", "sin datos", "unknown"})


def _fold(value: str) -> str:
    """Lower-case, strip, and remove combining accents."""
    decomposed = unicodedata.normalize("NFKD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(value: Optional[str]) -> Optional[str]:
    """Fold a raw ``potencial`` value into a comparable slug.

    Returns:
        The folded slug (``"solar"``, ``"eolica"``, ``"hibrida"`` or any other
        non-empty folded text), or ``None`` when the value means "no data".
    """
    if value is None:
        return None
    folded = _fold(value)
    if folded in NO_DATA_LABELS:
        return None
    return folded


def is_ground_truth_label(value: Optional[str]) -> bool:
    """True when ``value`` carries a usable dataset label."""
    return normalize_label(value) is not None


def to_technology(value: Optional[str]) -> Optional[Technology]:
    """Map a raw label to a ``Technology``; ``None`` if absent or unrecognised."""
    slug = normalize_label(value)
    if slug is None:
        return None
    try:
        return Technology(slug)
    except ValueError:
        return None
