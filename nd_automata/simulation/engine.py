"""Batch engine: one experiment per seed with JSON/Parquet outputs."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from nd_automata.config.constants import FLUSH_THRESHOLD
from nd_automata.config.types import ExperimentConfig, SweepConfig
from nd_automata.experiments.experiment import ExperimentResult, run_experiment
from nd_automata.io.schemas import (
    CLASSIFICATION_SUMMARY_SCHEMA,
    METRICS_HISTORY_SCHEMA,
    RUN_PAYLOAD_SCHEMA_VERSION,
)
from nd_automata.simulation.persistence import (
    append_metric_rows,
    empty_metric_columns,
    flush_metric_columns,
)

logger = logging.getLogger(__name__)


def deterministic_run_id(config: ExperimentConfig) -> str:
    """Build reproducible run ID stable across runs for identical seeds."""
    return f"seed{config.seed}_{config.dims_label}"


def _summary_row(run_id: str, result: ExperimentResult) -> dict[str, object]:
    config = result.config
    classification = result.classification
    return {
        "run_id": run_id,
        "seed": config.seed,
        "dimensions": config.dims_label,
        "neighborhood": config.neighborhood.type.value,
        "neighborhood_range": config.neighborhood.range,
        "rule": result.rule.notation(),
        "steps": config.steps,
        "initial_population": result.initial_population,
        "final_population": result.final_population,
        "outcome": classification.outcome.value,
        "wolfram_class": classification.wolfram_class.value,
        "confidence": classification.confidence,
        "cycle_detected": classification.details.cycle_detected,
        "cycle_period": classification.details.cycle_period,
        "entropy_trend": classification.details.entropy_trend.value,
        "population_trend": classification.details.population_trend.value,
    }


def run_seed_sweep(config: SweepConfig) -> list[ExperimentResult]:
    """Run the experiment once per seed and persist JSON/Parquet outputs.

    Layout under ``config.out_dir``::

        runs/<run_id>.json                    summary + classification per run
        logs/metrics_history.parquet          every sampled metrics record
        logs/classification_summary.parquet   one row per run
    """
    out_dir = Path(config.out_dir)
    runs_dir = out_dir / "runs"
    logs_dir = out_dir / "logs"
    runs_dir.mkdir(parents=True, exist_ok=True)
    logs_dir.mkdir(parents=True, exist_ok=True)

    metrics_path = logs_dir / "metrics_history.parquet"
    summary_path = logs_dir / "classification_summary.parquet"
    metric_writer: pq.ParquetWriter | None = None
    metric_columns = empty_metric_columns()
    summary_rows: list[dict[str, object]] = []
    results: list[ExperimentResult] = []

    try:
        for seed in config.seeds():
            experiment_config = config.experiment.with_seed(seed)
            run_id = deterministic_run_id(experiment_config)
            result = run_experiment(experiment_config)
            logger.info(
                "run %s: %s (%s, confidence %.2f)",
                run_id,
                result.classification.outcome.value,
                result.classification.wolfram_class.value,
                result.classification.confidence,
            )

            append_metric_rows(metric_columns, run_id, result.metrics_history)
            if len(metric_columns["run_id"]) >= FLUSH_THRESHOLD:
                metric_writer = flush_metric_columns(metric_columns, metrics_path, metric_writer)

            payload = {
                "run_id": run_id,
                **result.summary(),
                "schema_version": RUN_PAYLOAD_SCHEMA_VERSION,
            }
            (runs_dir / f"{run_id}.json").write_text(
                json.dumps(payload, ensure_ascii=False, indent=2)
            )
            summary_rows.append(_summary_row(run_id, result))
            results.append(result)

        metric_writer = flush_metric_columns(metric_columns, metrics_path, metric_writer)
    finally:
        if metric_writer is not None:
            metric_writer.close()

    if metric_writer is None:
        # Every run had an empty history (steps == 0); still leave a readable file.
        pq.write_table(
            pa.Table.from_pydict(empty_metric_columns(), schema=METRICS_HISTORY_SCHEMA),
            metrics_path,
        )
    pq.write_table(
        pa.Table.from_pylist(summary_rows, schema=CLASSIFICATION_SUMMARY_SCHEMA), summary_path
    )
    logger.info("wrote %d runs to %s", len(results), out_dir)
    return results

