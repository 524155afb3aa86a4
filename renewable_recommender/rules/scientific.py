"""
Deterministic threshold-based technology classifier.

Used whenever the learned classifier is unavailable or fails.  No learned
state; the same inputs always give the same answer.

Scores (0–100)
--------------
solar_score (only when radiation >= 3.5 kWh/m²/day, otherwise 0):
    50 + (radiation − 3.5) / (6.0 − 3.5) · 35
    +15 if radiation >= 4.5
    capped at 100.

wind_score (only when wind_speed >= 4.0 m/s, otherwise 0):
    50 + (wind_speed − 4.0) / (8.0 − 4.0) · 35
    +15 if wind_speed >= 6.0
    +5  if elevation > 500 m
    +10 if elevation > 1500 m  (cumulative with the +5)
    capped at 100.

Decision (first match wins)
---------------------------
    1. HYBRID : both viable and |solar − wind| < 20
                confidence = (solar + wind) / 200 + 0.1
    2. SOLAR  : solar >= wind and solar viable;  confidence = solar / 100
    3. WIND   : wind viable;                     confidence = wind / 100
    4. DEFAULT: neither viable → configured default (solar), confidence 0.3

The default in step 4 is a regional policy choice (solar is the most common
small-scale installation in Colombia), not a physical derivation, so it is
configurable.  Final confidence is clamped to [0.2, 0.95].
"""

from __future__ import annotations

from dataclasses import dataclass

from renewable_recommender.config import ScientificConfig
from renewable_recommender.taxonomy.technology import Technology

CONFIDENCE_FLOOR = 0.2
CONFIDENCE_CEILING = 0.95

_SCORE_BASE = 50.0
_SCORE_SPAN = 35.0
_GOOD_BONUS = 15.0
_HYBRID_BONUS = 0.1
_MODERATE_ELEVATION_M = 500.0
_HIGH_ELEVATION_M = 1500.0


@dataclass(frozen=True)
class ScientificResult:
    """Outcome of the rule classifier.

    Attributes:
        technology: Recommended technology.
        confidence: Clamped confidence in [0.2, 0.95].
        explanation: Human-readable justification.
        solar_score: Solar viability score (0 when not viable).
        wind_score: Wind viability score (0 when not viable).
    """

    technology: Technology
    confidence: float
    explanation: str
    solar_score: float
    wind_score: float


def clamp_confidence(value: float) -> float:
    return max(CONFIDENCE_FLOOR, min(CONFIDENCE_CEILING, value))


class ScientificClassifier:
    """Threshold classifier over radiation, wind speed and elevation."""

    def __init__(self, config: ScientificConfig | None = None) -> None:
        self.config = config or ScientificConfig()

    # ── Scores ────────────────────────────────────────────────────────────────

    def solar_score(self, radiation: float) -> float:
        cfg = self.config
        if radiation < cfg.solar_min_radiation:
            return 0.0
        score = _SCORE_BASE + (
            (radiation - cfg.solar_min_radiation)
            / (cfg.solar_reference_radiation - cfg.solar_min_radiation)
        ) * _SCORE_SPAN
        if radiation >= cfg.solar_good_radiation:
            score += _GOOD_BONUS
        return min(100.0, score)

    def wind_score(self, wind_speed: float, elevation: float) -> float:
        cfg = self.config
        if wind_speed < cfg.wind_min_speed:
            return 0.0
        score = _SCORE_BASE + (
            (wind_speed - cfg.wind_min_speed)
            / (cfg.wind_reference_speed - cfg.wind_min_speed)
        ) * _SCORE_SPAN
        if wind_speed >= cfg.wind_good_speed:
            score += _GOOD_BONUS
        if elevation > _MODERATE_ELEVATION_M:
            score += 5.0
        if elevation > _HIGH_ELEVATION_M:
            score += 10.0
        return min(100.0, score)

    # ── Classification ────────────────────────────────────────────────────────

    def classify(self, radiation: float, wind_speed: float, elevation: float) -> ScientificResult:
        """Classify one parameter set.

        Args:
            radiation: kWh/m²/day.
            wind_speed: m/s.
            elevation: metres above sea level.

        Returns:
            ``ScientificResult`` with a confidence in [0.2, 0.95].
        """
        cfg = self.config
        solar = self.solar_score(radiation)
        wind = self.wind_score(wind_speed, elevation)
        solar_viable = radiation >= cfg.solar_min_radiation
        wind_viable = wind_speed >= cfg.wind_min_speed

        if solar_viable and wind_viable and abs(solar - wind) < cfg.hybrid_score_margin:
            technology = Technology.HYBRID
            confidence = (solar + wind) / 200.0 + _HYBRID_BONUS
            explanation = (
                f"Hybrid generation is recommended: conditions are balanced for both "
                f"solar and wind. Radiation of {radiation:.1f} kWh/m²/day and wind "
                f"speed of {wind_speed:.1f} m/s give a combined viability of "
                f"{(solar + wind) / 2:.0f}%."
            )
        elif solar >= wind and solar_viable:
            technology = Technology.SOLAR
            confidence = solar / 100.0
            explanation = (
                f"Solar generation is recommended: {radiation:.1f} kWh/m²/day of "
                f"radiation gives a solar viability of {solar:.0f}%."
            )
        elif wind_viable:
            technology = Technology.WIND
            confidence = wind / 100.0
            explanation = (
                f"Wind generation is recommended: a wind speed of {wind_speed:.1f} m/s "
                f"gives a wind viability of {wind:.0f}%."
            ) + _elevation_note(elevation)
        else:
            technology = Technology(cfg.default_technology)
            confidence = cfg.default_confidence
            explanation = (
                f"{technology.value.capitalize()} generation is suggested as a basic option; "
                f"neither threshold is met (radiation {radiation:.1f} kWh/m²/day, "
                f"wind {wind_speed:.1f} m/s), so only small-scale generation is advisable."
            )

        return ScientificResult(
            technology=technology,
            confidence=clamp_confidence(confidence),
            explanation=explanation,
            solar_score=solar,
            wind_score=wind,
        )


def _elevation_note(elevation: float) -> str:
    if elevation > _HIGH_ELEVATION_M:
        return " High elevation favours wind generation."
    if elevation > _MODERATE_ELEVATION_M:
        return " Moderate elevation is favourable for wind."
    return ""
