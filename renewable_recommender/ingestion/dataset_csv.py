"""
CSV loader for the renewable-potential dataset.

Format — comma delimited, with a header row.
Required columns:
  departamento, municipio, latitud, longitud, altitud_msnm,
  radiacion_kWhm2_dia, viento_ms, temperatura_C

Optional columns (empty string → None):
  codigo_dane_municipio, humedad_relativa_pct, nubosidad_pct, tipo_red,
  demanda_kWh_mes, relieve_indice, potencial

Parsing rules
-------------
- Decimal point only (``4.5``, not ``4,5``).
- A row whose latitude/longitude does not parse is dropped and counted.
- Any other unparsable numeric cell becomes ``None``; the record is kept but
  will be skipped by interpolation and training if a core field is missing.
- ``potencial`` is kept as written; normalisation happens downstream.
"""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path
from typing import Optional

from renewable_recommender.models.dataset import Dataset
from renewable_recommender.models.measurement import EnvironmentalReading, MeasurementRecord

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({
    "departamento", "municipio", "latitud", "longitud", "altitud_msnm",
    "radiacion_kWhm2_dia", "viento_ms", "temperatura_C",
})


def parse_dataset_csv(path: Path) -> Dataset:
    """Parse the dataset CSV into a :class:`Dataset`.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        ``Dataset`` of records with valid coordinates, in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the header is missing or lacks required columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset CSV file not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip() for c in reader.fieldnames}
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = [{(k or "").strip(): v for k, v in row.items()} for row in reader]

    records: list[MeasurementRecord] = []
    skipped = 0
    for row in rows:
        record = row_to_record(row)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.warning("Skipped %d row(s) without valid coordinates in %s", skipped, path.name)
    logger.info("Parsed %d records from %s", len(records), path.name)
    return Dataset(records)


def row_to_record(row: dict[str, Optional[str]]) -> Optional[MeasurementRecord]:
    """Convert one CSV row dict to a record; ``None`` if coordinates are unusable."""
    lat = _to_float(row.get("latitud"))
    lon = _to_float(row.get("longitud"))
    if lat is None or lon is None:
        return None

    return MeasurementRecord(
        department=_text(row.get("departamento")) or "",
        municipality=_text(row.get("municipio")) or "",
        dane_code=_text(row.get("codigo_dane_municipio")) or "",
        lat=lat,
        lon=lon,
        environment=EnvironmentalReading(
            radiation=_to_float(row.get("radiacion_kWhm2_dia")),
            wind_speed=_to_float(row.get("viento_ms")),
            elevation=_to_float(row.get("altitud_msnm")),
            temperature=_to_float(row.get("temperatura_C")),
            humidity=_to_float(row.get("humedad_relativa_pct")),
            cloud_cover=_to_float(row.get("nubosidad_pct")),
        ),
        grid_type=_text(row.get("tipo_red")),
        demand=_to_float(row.get("demanda_kWh_mes")),
        relief_index=_to_float(row.get("relieve_indice")),
        potential=_text(row.get("potencial")),
    )


# ── Private helpers ────────────────────────────────────────────────────────────

def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _to_float(value: Optional[str]) -> Optional[float]:
    """Parse a finite float; ``None`` for empty, unparsable, NaN or infinite cells."""
    text = _text(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
