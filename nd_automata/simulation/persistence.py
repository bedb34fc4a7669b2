"""Parquet persistence helpers for metrics-history streams."""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from nd_automata.io.schemas import METRICS_HISTORY_COLUMNS, METRICS_HISTORY_SCHEMA
from nd_automata.simulation.step import EnhancedMetrics


def empty_metric_columns() -> dict[str, list[int | str | float]]:
    """Fresh column buffers keyed by the metrics-history schema."""
    return {name: [] for name in METRICS_HISTORY_COLUMNS}


def append_metric_rows(
    metric_columns: dict[str, list[int | str | float]],
    run_id: str,
    history: list[EnhancedMetrics],
) -> None:
    """Append one row per metrics record to the column buffers."""
    for metrics in history:
        metric_columns["run_id"].append(run_id)
        metric_columns["step"].append(metrics.step)
        metric_columns["population"].append(metrics.population)
        metric_columns["density"].append(metrics.density)
        metric_columns["births"].append(metrics.births)
        metric_columns["deaths"].append(metrics.deaths)
        metric_columns["delta"].append(metrics.delta)
        metric_columns["entropy"].append(metrics.entropy)
        metric_columns["state_hash"].append(metrics.state_hash)


def flush_metric_columns(
    metric_columns: dict[str, list[int | str | float]],
    metrics_path: Path,
    metric_writer: pq.ParquetWriter | None,
) -> pq.ParquetWriter | None:
    """Write accumulated metric rows to Parquet and clear in-memory buffers."""
    if not metric_columns["run_id"]:
        return metric_writer
    table = pa.Table.from_pydict(metric_columns, schema=METRICS_HISTORY_SCHEMA)
    if metric_writer is None:
        metric_writer = pq.ParquetWriter(metrics_path, METRICS_HISTORY_SCHEMA)
    metric_writer.write_table(table)
    for values in metric_columns.values():
        values.clear()
    return metric_writer
