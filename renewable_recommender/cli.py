"""
Renewable Recommender — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the dataset and train the forest classifier (where needed).
  4. Run the engine operation.
  5. Report the result to stdout.

Install and run::

    pip install -e .
    renewable-recommender --help
    renewable-recommender validate-config
    renewable-recommender recommend --lat 11.5 --lon -72.9
    renewable-recommender simulate --radiation 5.2 --wind 3.1 --elevation 400 --temperature 27
    renewable-recommender departments
    renewable-recommender model-stats
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="renewable-recommender",
    help="Solar / wind / hybrid recommendation for points of the Colombian territory.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from renewable_recommender.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from renewable_recommender.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_dataset_or_exit(config, dataset_path: Optional[str]):
    """Parse the dataset CSV, exiting with code 1 on failure."""
    from renewable_recommender.ingestion.dataset_csv import parse_dataset_csv

    path = Path(dataset_path) if dataset_path else Path(config.data.dataset_path)
    try:
        return parse_dataset_csv(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Dataset load failed:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _build_engine(config, dataset_path: Optional[str], train: bool = True):
    """Wire dataset + engine and run the one-off training pass."""
    from renewable_recommender.engine.recommender import RecommendationEngine

    dataset = _load_dataset_or_exit(config, dataset_path)
    engine = RecommendationEngine(config=config, dataset=dataset)
    if train:
        report = engine.train()
        if not report.ready:
            typer.echo(
                f"[WARN] Forest classifier unavailable ({report.error}); "
                "using scientific rules.",
                err=True,
            )
    return engine


def _print_recommendation(rec, as_json: bool) -> None:
    if as_json:
        typer.echo(rec.model_dump_json(indent=2))
        return

    typer.echo(f"  Technology:  {rec.technology}")
    typer.echo(f"  Confidence:  {rec.confidence_pct}%")
    typer.echo(f"  Source:      {rec.source.value}")
    p = rec.parameters
    typer.echo(
        f"  Parameters:  radiation={p.radiation} kWh/m²/day  wind={p.wind_speed} m/s  "
        f"elevation={p.elevation} m  temperature={p.temperature} °C"
    )
    if rec.interpolation is not None:
        meta = rec.interpolation
        typer.echo(
            f"  Estimated by {meta.method} from {meta.neighbor_count} neighbour(s); "
            f"nearest {meta.nearest_municipality} ({meta.nearest_department}) "
            f"at {meta.nearest_distance_km:.1f} km"
        )
    typer.echo(f"  {rec.explanation}")


_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_DATASET_OPTION = typer.Option(
    None, "--dataset", help="Override dataset CSV path from config."
)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print full config as JSON."),
) -> None:
    """Validate the configuration file and print the key values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Dataset path:       {config.data.dataset_path}")
    typer.echo(f"  IDW neighbours:     {config.interpolation.k_neighbors}")
    typer.echo(f"  Forest trees:       {config.forest.n_estimators}")
    typer.echo(f"  Random seed:        {config.forest.random_seed}")
    typer.echo(f"  Confidence method:  {config.forest.confidence_method}")
    typer.echo(f"  Default technology: {config.scientific.default_technology}")
    typer.echo(f"  Log level:          {config.logging.level}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("recommend")
def recommend(
    lat: float = typer.Option(..., "--lat", help="Latitude in decimal degrees."),
    lon: float = typer.Option(..., "--lon", help="Longitude in decimal degrees."),
    as_json: bool = typer.Option(False, "--json", help="Print the recommendation as JSON."),
    no_train: bool = typer.Option(
        False, "--no-train", help="Skip forest training; use dataset labels and rules only."
    ),
    dataset_path: Optional[str] = _DATASET_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Recommend a technology for a coordinate.

    \b
    Uses the nearest dataset record when one lies within ~5 km, otherwise
    estimates the environment by IDW over the 8 nearest municipalities.
    """
    from renewable_recommender.errors import RecommenderError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = _build_engine(config, dataset_path, train=not no_train)

    try:
        rec = engine.recommend_at(lat, lon)
    except RecommenderError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not as_json:
        typer.echo(f"Recommendation for ({lat}, {lon}):")
    _print_recommendation(rec, as_json)


@app.command("simulate")
def simulate(
    radiation: float = typer.Option(..., "--radiation", help="kWh/m²/day (0–10)."),
    wind: float = typer.Option(..., "--wind", help="Wind speed in m/s (0–50)."),
    elevation: float = typer.Option(..., "--elevation", help="Metres above sea level (-500–6000)."),
    temperature: float = typer.Option(..., "--temperature", help="°C (-10–50)."),
    as_json: bool = typer.Option(False, "--json", help="Print the recommendation as JSON."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Recommend for manually entered measurements (no location needed)."""
    from renewable_recommender.engine.recommender import RecommendationEngine
    from renewable_recommender.errors import RecommenderError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = RecommendationEngine(config=config)

    try:
        rec = engine.simulate(radiation, wind, elevation, temperature)
    except RecommenderError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not as_json:
        typer.echo("Simulation result:")
    _print_recommendation(rec, as_json)


@app.command("departments")
def departments(
    dataset_path: Optional[str] = _DATASET_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print per-department mean radiation, wind, elevation and temperature."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    dataset = _load_dataset_or_exit(config, dataset_path)

    def _fmt(value: Optional[float], pattern: str) -> str:
        return "n/a" if value is None else format(value, pattern)

    typer.echo(f"{'Department':<28} {'n':>4} {'rad':>6} {'wind':>6} {'elev':>7} {'temp':>6}")
    for agg in sorted(dataset.departments.values(), key=lambda a: a.department):
        typer.echo(
            f"{agg.department[:28]:<28} {agg.count:>4} "
            f"{_fmt(agg.mean_radiation, '.2f'):>6} {_fmt(agg.mean_wind_speed, '.2f'):>6} "
            f"{_fmt(agg.mean_elevation, '.0f'):>7} {_fmt(agg.mean_temperature, '.1f'):>6}"
        )


@app.command("model-stats")
def model_stats(
    dataset_path: Optional[str] = _DATASET_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Train the forest classifier on the dataset and print its status."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = _build_engine(config, dataset_path, train=True)
    stats = engine.model_stats()

    typer.echo(f"  State:             {stats.state.value}")
    typer.echo(f"  Ready:             {stats.is_ready}")
    typer.echo(f"  Features:          {', '.join(stats.features)}")
    typer.echo(f"  Classes:           {', '.join(stats.classes)}")
    typer.echo(f"  Training samples:  {stats.n_samples}")
    typer.echo(f"  Class counts:      {stats.class_counts}")
    if stats.training_accuracy is not None:
        typer.echo(f"  Training accuracy: {stats.training_accuracy:.2%}")
    if not stats.is_ready:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
