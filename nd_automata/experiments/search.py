"""CLI entrypoint for automaton runs.

This module owns CLI argument parsing and mode dispatch. All domain logic
lives in the extracted modules:

- ``nd_automata.config``              – configuration dataclasses
- ``nd_automata.experiments``         – single-run orchestration
- ``nd_automata.simulation.engine``   – ``run_seed_sweep`` batch engine
- ``nd_automata.viz``                 – optional figures
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from nd_automata.config.constants import (
    DEFAULT_DENSITY,
    DEFAULT_METRICS_INTERVAL,
    DEFAULT_RANGE,
    DEFAULT_SEED,
    DEFAULT_STEPS,
)
from nd_automata.config.types import ExperimentConfig, NeighborhoodConfig, SweepConfig
from nd_automata.domain.neighborhood import NeighborhoodType
from nd_automata.domain.rules import RelativeThreshold, ThresholdValue
from nd_automata.experiments.experiment import ExperimentResult, build_rule, run_experiment
from nd_automata.simulation.engine import deterministic_run_id, run_seed_sweep

# ---------------------------------------------------------------------------
# CLI parsing helpers
# ---------------------------------------------------------------------------


def _parse_dimensions(raw_dimensions: object) -> tuple[int, ...]:
    """Parse ``20x20x20`` (or a JSON list) into a dimensions tuple."""
    if isinstance(raw_dimensions, (list, tuple)):
        parts = list(raw_dimensions)
    else:
        parts = [part.strip() for part in str(raw_dimensions).lower().split("x")]
    if not parts or any(part == "" for part in parts):
        raise ValueError("dimensions must use NxMx... format")
    dims: list[int] = []
    for part in parts:
        try:
            dims.append(_coerce_int(part, "dimensions"))
        except ValueError as exc:
            raise ValueError("dimensions must use integer NxMx... values") from exc
    return tuple(dims)


def _parse_thresholds(raw: object, key: str, relative: bool) -> tuple[ThresholdValue, ...]:
    """Parse ``"2,3"`` (or a JSON list) into absolute or relative thresholds."""
    if isinstance(raw, (list, tuple)):
        parts = list(raw)
    else:
        parts = [part.strip() for part in str(raw).split(",") if part.strip()]

    values: list[ThresholdValue] = []
    for part in parts:
        if isinstance(part, dict):
            values.append(RelativeThreshold(_coerce_float(part.get("relative"), key)))
        elif relative:
            values.append(RelativeThreshold(_coerce_float(part, key)))
        else:
            values.append(_coerce_int(part, key))
    return tuple(values)


def _parse_neighborhood(raw: str) -> NeighborhoodType:
    """Parse neighbourhood type from CLI/config."""
    try:
        return NeighborhoodType.parse(raw)
    except ValueError as exc:
        valid = ", ".join(kind.value for kind in NeighborhoodType)
        raise ValueError(f"neighborhood must be one of {valid}") from exc


def _coerce_bool(raw: object, key: str) -> bool:
    """Accept only JSON booleans; ``--relative`` already yields one."""
    if not isinstance(raw, bool):
        raise ValueError(f"{key} must be true or false")
    return raw


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be an integer value, got {raw!r}") from exc
    raise ValueError(f"{key} must be an integer value")


def _coerce_float(raw: object, key: str) -> float:
    """Coerce raw value to float; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a float value")
    if isinstance(raw, (int, float, str)):
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be a float value, got {raw!r}") from exc
    raise ValueError(f"{key} must be a float value")


def _coerce_str(raw: object, key: str) -> str:
    """Coerce raw value to str; rejects booleans."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be a string-coercible value")
    if isinstance(raw, (str, Path, int, float)):
        return str(raw)
    raise ValueError(f"{key} must be a string-coercible value")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _get_bool(cli_val: bool | None, key: str, file_cfg: dict[str, object], default: bool) -> bool:
    """CLI > file > default resolution for boolean flags."""
    return _coerce_bool(_get_val(cli_val, key, file_cfg, default), key)


def _get_int(cli_val: int | None, key: str, file_cfg: dict[str, object], default: int) -> int:
    """CLI > file > default resolution for integer values."""
    return _coerce_int(_get_val(cli_val, key, file_cfg, default), key)


def _get_float(
    cli_val: float | None, key: str, file_cfg: dict[str, object], default: float
) -> float:
    """CLI > file > default resolution for float values."""
    return _coerce_float(_get_val(cli_val, key, file_cfg, default), key)


def _get_str(cli_val: str | None, key: str, file_cfg: dict[str, object], default: str) -> str:
    """CLI > file > default resolution for string values."""
    return _coerce_str(_get_val(cli_val, key, file_cfg, default), key)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Run and classify N-dimensional toroidal cellular automata"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--dimensions", type=str, default=None, help="e.g. 20x20 or 10x10x10")
    parser.add_argument(
        "--neighborhood",
        type=str,
        choices=[kind.value for kind in NeighborhoodType] + ["von-neumann"],
        default=None,
    )
    parser.add_argument("--range", dest="neighborhood_range", type=int, default=None)
    parser.add_argument("--birth", type=str, default=None, help="comma-separated counts")
    parser.add_argument("--survival", type=str, default=None, help="comma-separated counts")
    parser.add_argument(
        "--relative",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Interpret --birth/--survival as fractions of the neighbour count",
    )
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument("--density", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--metrics-interval", type=int, default=None)
    parser.add_argument("--n-seeds", type=int, default=None)
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Run a seed sweep and write JSON/Parquet artifacts here",
    )
    parser.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Write a metrics timeline PNG (single run) to this path",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def _experiment_config(args: argparse.Namespace, file_cfg: dict[str, object]) -> ExperimentConfig:
    dimensions = _parse_dimensions(_get_val(args.dimensions, "dimensions", file_cfg, "20x20"))
    file_neighborhood = file_cfg.get("neighborhood")
    if isinstance(file_neighborhood, dict):
        neighborhood_raw = args.neighborhood or file_neighborhood.get("type", "moore")
        range_default = file_neighborhood.get("range", DEFAULT_RANGE)
    else:
        neighborhood_raw = _get_str(args.neighborhood, "neighborhood", file_cfg, "moore")
        range_default = file_cfg.get("range", DEFAULT_RANGE)
    neighborhood_range = _coerce_int(
        args.neighborhood_range if args.neighborhood_range is not None else range_default,
        "range",
    )
    relative = _get_bool(args.relative, "relative", file_cfg, False)
    return ExperimentConfig(
        dimensions=dimensions,
        neighborhood=NeighborhoodConfig(
            type=_parse_neighborhood(_coerce_str(neighborhood_raw, "neighborhood")),
            range=neighborhood_range,
        ),
        birth=_parse_thresholds(_get_val(args.birth, "birth", file_cfg, "3"), "birth", relative),
        survival=_parse_thresholds(
            _get_val(args.survival, "survival", file_cfg, "2,3"), "survival", relative
        ),
        steps=_get_int(args.steps, "steps", file_cfg, DEFAULT_STEPS),
        initial_density=_get_float(
            args.density,
            "initial_density",
            file_cfg,
            _coerce_float(file_cfg.get("density", DEFAULT_DENSITY), "density"),
        ),
        seed=_get_int(args.seed, "seed", file_cfg, DEFAULT_SEED),
        metrics_interval=_get_int(
            args.metrics_interval, "metrics_interval", file_cfg, DEFAULT_METRICS_INTERVAL
        ),
    )


def _single_run_summary(result: ExperimentResult) -> dict[str, object]:
    return {
        "mode": "single",
        "run_id": deterministic_run_id(result.config),
        **result.summary(),
    }


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for automaton runs.

    Supports ``--config path/to/config.json`` for experiment reproducibility.
    CLI arguments override config-file values; config-file values override
    built-in defaults. Without ``--out-dir`` a single run is classified and
    printed; with it a seed sweep persists its artifacts.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Load config file defaults (CLI overrides file, file overrides built-in)
    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")
        if not isinstance(file_cfg, dict):
            parser.error(f"Config file must hold a JSON object: {args.config}")

    try:
        experiment_config = _experiment_config(args, file_cfg)
        build_rule(experiment_config)
        n_seeds = _get_int(args.n_seeds, "n_seeds", file_cfg, 1)
        out_dir_raw = args.out_dir if args.out_dir is not None else file_cfg.get("out_dir")
        sweep_config = (
            SweepConfig(
                experiment=experiment_config,
                n_seeds=n_seeds,
                base_seed=experiment_config.seed,
                out_dir=Path(_coerce_str(out_dir_raw, "out_dir")),
            )
            if out_dir_raw is not None
            else None
        )
    except ValueError as exc:
        parser.error(str(exc))

    if sweep_config is not None:
        if args.plot is not None:
            parser.error("--plot is only supported for single runs")
        results = run_seed_sweep(sweep_config)
        outcomes: dict[str, int] = {}
        for result in results:
            key = result.classification.outcome.value
            outcomes[key] = outcomes.get(key, 0) + 1
        summary: dict[str, object] = {
            "mode": "sweep",
            "out_dir": str(sweep_config.out_dir),
            "total_runs": len(results),
            "outcomes": outcomes,
        }
    else:
        if n_seeds != 1:
            parser.error("--n-seeds requires --out-dir")
        result = run_experiment(experiment_config)
        summary = _single_run_summary(result)
        if args.plot is not None:
            import matplotlib

            matplotlib.use("Agg")
            from nd_automata.viz.render import render_metric_timeline

            summary["plot"] = str(
                render_metric_timeline(result.metrics_history, args.plot, result.classification)
            )
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
