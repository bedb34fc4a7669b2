"""Parquet schema definitions for automaton run artifacts.

All Arrow schemas used for persisting metrics histories and run summaries
are centralised here so that every module works against the same column
contracts.
"""

from __future__ import annotations

import pyarrow as pa

# ---------------------------------------------------------------------------
# Schema version constants
# ---------------------------------------------------------------------------

RUN_PAYLOAD_SCHEMA_VERSION = 1
SNAPSHOT_SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Per-step metrics
# ---------------------------------------------------------------------------

METRICS_HISTORY_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("step", pa.int64()),
        ("population", pa.int64()),
        ("density", pa.float64()),
        ("births", pa.int64()),
        ("deaths", pa.int64()),
        ("delta", pa.int64()),
        ("entropy", pa.float64()),
        ("state_hash", pa.int64()),
    ]
)

# ---------------------------------------------------------------------------
# Per-run classification summary
# ---------------------------------------------------------------------------

CLASSIFICATION_SUMMARY_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("seed", pa.int64()),
        ("dimensions", pa.string()),
        ("neighborhood", pa.string()),
        ("neighborhood_range", pa.int64()),
        ("rule", pa.string()),
        ("steps", pa.int64()),
        ("initial_population", pa.int64()),
        ("final_population", pa.int64()),
        ("outcome", pa.string()),
        ("wolfram_class", pa.string()),
        ("confidence", pa.float64()),
        ("cycle_detected", pa.bool_()),
        ("cycle_period", pa.int64()),
        ("entropy_trend", pa.string()),
        ("population_trend", pa.string()),
    ]
)

METRICS_HISTORY_COLUMNS = [f.name for f in METRICS_HISTORY_SCHEMA]
CLASSIFICATION_SUMMARY_COLUMNS = [f.name for f in CLASSIFICATION_SUMMARY_SCHEMA]
