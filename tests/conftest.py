"""
Shared pytest fixtures for the Renewable Recommender test suite.

Provides:
  - ``make_record``: factory for ``MeasurementRecord`` with sensible defaults.
  - ``scenario_dataset``: the 3-record dataset around Bogotá plus one
    Caribbean hybrid site (solar / eolica / hibrida, one label each).
  - ``training_dataset``: a larger labelled dataset with well separated
    solar, eolica and hibrida clusters, for forest training tests.
  - ``config``: default ``AppConfig`` with a small, fast forest.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from renewable_recommender.config import AppConfig, ForestConfig
from renewable_recommender.models.dataset import Dataset
from renewable_recommender.models.measurement import EnvironmentalReading, MeasurementRecord


def build_record(
    lat: float,
    lon: float,
    radiation: Optional[float] = 5.0,
    wind_speed: Optional[float] = 2.0,
    elevation: Optional[float] = 100.0,
    temperature: Optional[float] = 25.0,
    potential: Optional[str] = None,
    department: str = "Cundinamarca",
    municipality: str = "Municipio",
) -> MeasurementRecord:
    return MeasurementRecord(
        department=department,
        municipality=municipality,
        lat=lat,
        lon=lon,
        environment=EnvironmentalReading(
            radiation=radiation,
            wind_speed=wind_speed,
            elevation=elevation,
            temperature=temperature,
        ),
        potential=potential,
    )


@pytest.fixture
def make_record() -> Callable[..., MeasurementRecord]:
    """Return the ``build_record`` factory."""
    return build_record


# ── Datasets ──────────────────────────────────────────────────────────────────

@pytest.fixture
def scenario_dataset() -> Dataset:
    """Two Andean records 0.14° apart and one distant Caribbean record."""
    return Dataset([
        build_record(4.0, -74.0, radiation=5.0, wind_speed=2.0, elevation=2600.0,
                     temperature=14.0, potential="solar", municipality="Soacha"),
        build_record(4.1, -74.1, radiation=4.0, wind_speed=7.0, elevation=1800.0,
                     temperature=16.0, potential="eolica", municipality="Facatativá"),
        build_record(10.0, -75.0, radiation=4.8, wind_speed=5.0, elevation=800.0,
                     temperature=28.0, potential="hibrida", department="Bolívar",
                     municipality="Turbaco"),
    ])


@pytest.fixture
def training_dataset() -> Dataset:
    """30 solar, 6 eolica and 4 hibrida records in distinct regions.

    - solar   : Andean interior, high radiation, calm wind.
    - eolica  : La Guajira coast, strong wind.
    - hibrida : Caribbean lowlands, moderate radiation and wind.
    Two unlabelled records and one with an unknown label are mixed in.
    """
    records: list[MeasurementRecord] = []
    for i in range(30):
        records.append(build_record(
            4.0 + 0.05 * i, -75.0 + 0.03 * i,
            radiation=5.4 + 0.01 * i, wind_speed=1.5 + 0.02 * i,
            elevation=1200.0 + 10 * i, temperature=20.0,
            potential="Solar", department="Antioquia", municipality=f"S{i}",
        ))
    for i in range(6):
        records.append(build_record(
            11.5 + 0.05 * i, -72.5 + 0.05 * i,
            radiation=4.2, wind_speed=8.5 + 0.1 * i,
            elevation=20.0, temperature=29.0,
            potential="Eólica", department="La Guajira", municipality=f"E{i}",
        ))
    for i in range(4):
        records.append(build_record(
            8.5 + 0.05 * i, -74.0,
            radiation=4.8, wind_speed=5.2 + 0.1 * i,
            elevation=60.0, temperature=31.0,
            potential="HIBRIDA", department="Sucre", municipality=f"H{i}",
        ))
    records.append(build_record(6.0, -73.0, potential=None, municipality="U1"))
    records.append(build_record(6.1, -73.1, potential="Desconocido", municipality="U2"))
    records.append(build_record(6.2, -73.2, potential="geotermica", municipality="U3"))
    return Dataset(records)


# ── Config ────────────────────────────────────────────────────────────────────

@pytest.fixture
def config() -> AppConfig:
    """Default config with a 30-tree forest to keep training fast."""
    return AppConfig(forest=ForestConfig(n_estimators=30))
