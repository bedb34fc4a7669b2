"""Capture, persist and resume mid-run experiment state.

A snapshot holds the grid buffer, the number of steps already taken, the
metrics history so far and the experiment config. Snapshots are stored as
JSON; the grid buffer may be run-length encoded as ``[value, count, ...]``
pairs with counts capped at 255.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence

from nd_automata.config.constants import MAX_CELL_VALUE, RLE_MAX_RUN, UINT32_MASK
from nd_automata.config.types import ExperimentConfig
from nd_automata.domain.grid import Grid
from nd_automata.domain.neighborhood import generate_neighborhood, max_neighbor_count
from nd_automata.domain.rules import Rule, rule_from_thresholds
from nd_automata.io.schemas import SNAPSHOT_SCHEMA_VERSION
from nd_automata.simulation.step import EnhancedMetrics, Metrics
from nd_automata.simulation.stepper import EvolutionResult, Stepper, evolve_enhanced

logger = logging.getLogger(__name__)

_ENHANCED_KEYS = frozenset({"entropy", "state_hash"})


@dataclass(frozen=True)
class ExperimentSnapshot:
    """Serializable state of a run after ``steps_taken`` generations."""

    id: str
    timestamp: str
    steps_taken: int
    dimensions: tuple[int, ...]
    grid_data: bytes
    config: ExperimentConfig
    metrics_history: tuple[Metrics, ...] = field(default_factory=tuple)

    def to_dict(self, compress: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "schema_version": SNAPSHOT_SCHEMA_VERSION,
            "id": self.id,
            "timestamp": self.timestamp,
            "steps_taken": self.steps_taken,
            "dimensions": list(self.dimensions),
            "metrics_history": [m.to_dict() for m in self.metrics_history],
            "config": self.config.to_dict(),
        }
        if compress:
            payload["compressed"] = True
            payload["rle_data"] = rle_encode(self.grid_data)
            payload["grid_data"] = []
        else:
            payload["grid_data"] = list(self.grid_data)
        return payload


def _new_snapshot_id() -> str:
    return f"snap_{uuid.uuid4().hex[:12]}"


def create_snapshot(
    grid: Grid,
    steps_taken: int,
    metrics_history: Iterable[Metrics],
    config: ExperimentConfig,
) -> ExperimentSnapshot:
    """Copy the grid and history into a new snapshot."""
    if steps_taken < 0:
        raise ValueError("steps_taken must be >= 0")
    return ExperimentSnapshot(
        id=_new_snapshot_id(),
        timestamp=datetime.now(timezone.utc).isoformat(),
        steps_taken=steps_taken,
        dimensions=grid.dimensions,
        grid_data=grid.to_bytes(),
        config=config,
        metrics_history=tuple(metrics_history),
    )


# ---------------------------------------------------------------------------
# Run-length encoding
# ---------------------------------------------------------------------------


def rle_encode(data: Sequence[int] | bytes) -> list[int]:
    """Encode as flat ``[value, count, value, count, ...]`` with count <= 255."""
    encoded: list[int] = []
    if len(data) == 0:
        return encoded
    current = data[0]
    run = 1
    for value in data[1:]:
        if value == current and run < RLE_MAX_RUN:
            run += 1
        else:
            encoded.extend((int(current), run))
            current = value
            run = 1
    encoded.extend((int(current), run))
    return encoded


def rle_decode(encoded: Sequence[int]) -> bytes:
    """Inverse of :func:`rle_encode`."""
    if len(encoded) % 2:
        raise ValueError("rle_data must hold an even number of entries")
    out = bytearray()
    for i in range(0, len(encoded), 2):
        value, count = encoded[i], encoded[i + 1]
        if not 0 <= value <= MAX_CELL_VALUE:
            raise ValueError(f"rle_data value {value} outside [0, {MAX_CELL_VALUE}]")
        if not 1 <= count <= RLE_MAX_RUN:
            raise ValueError(f"rle_data run length {count} outside [1, {RLE_MAX_RUN}]")
        out.extend(bytes([value]) * count)
    return bytes(out)


# ---------------------------------------------------------------------------
# Validation and (de)serialisation
# ---------------------------------------------------------------------------


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_INT_METRIC_KEYS = ("population", "births", "deaths", "delta", "step")


def _validate_metrics_entry(i: int, raw: object) -> None:
    if not isinstance(raw, Mapping):
        raise ValueError(f"snapshot.metrics_history[{i}] must be an object")
    for key in _INT_METRIC_KEYS:
        if not _is_int(raw.get(key)):
            raise ValueError(f"snapshot.metrics_history[{i}].{key} must be an integer")
    if not _is_number(raw.get("density")):
        raise ValueError(f"snapshot.metrics_history[{i}].density must be a number")
    if _ENHANCED_KEYS & raw.keys():
        if not _is_number(raw.get("entropy")):
            raise ValueError(f"snapshot.metrics_history[{i}].entropy must be a number")
        state_hash = raw.get("state_hash")
        if not _is_int(state_hash) or not 0 <= state_hash <= UINT32_MASK:
            raise ValueError(
                f"snapshot.metrics_history[{i}].state_hash must be an integer in [0, 2**32)"
            )


def _validate_snapshot_config(config: object) -> None:
    if not isinstance(config, Mapping):
        raise ValueError("snapshot.config must be an object")
    for key in ("dimensions", "steps", "initial_density"):
        if key not in config:
            raise ValueError(f"snapshot.config.{key} is required")
    dimensions = config["dimensions"]
    if not isinstance(dimensions, list) or not all(_is_int(d) for d in dimensions):
        raise ValueError("snapshot.config.dimensions must be a list of integers")
    if not _is_int(config["steps"]):
        raise ValueError("snapshot.config.steps must be an integer")
    if not _is_number(config["initial_density"]):
        raise ValueError("snapshot.config.initial_density must be a number")
    for key in ("seed", "metrics_interval"):
        if key in config and not _is_int(config[key]):
            raise ValueError(f"snapshot.config.{key} must be an integer")


def _metrics_from_dict(raw: Mapping[str, Any]) -> Metrics:
    if _ENHANCED_KEYS <= raw.keys():
        return EnhancedMetrics(**{k: raw[k] for k in EnhancedMetrics.__dataclass_fields__})
    return Metrics(**{k: raw[k] for k in Metrics.__dataclass_fields__})


def validate_snapshot(payload: object) -> None:
    """Raise ``ValueError`` naming the first malformed field of a snapshot payload."""
    if not isinstance(payload, Mapping):
        raise ValueError("snapshot must be a JSON object")
    if not isinstance(payload.get("id"), str):
        raise ValueError("snapshot.id must be a string")
    if not isinstance(payload.get("timestamp"), str):
        raise ValueError("snapshot.timestamp must be a string")
    steps_taken = payload.get("steps_taken")
    if not _is_int(steps_taken) or steps_taken < 0:
        raise ValueError("snapshot.steps_taken must be an integer >= 0")

    dimensions = payload.get("dimensions")
    if not isinstance(dimensions, list) or not dimensions:
        raise ValueError("snapshot.dimensions must be a non-empty list")
    if not all(_is_int(d) and d > 0 for d in dimensions):
        raise ValueError("snapshot.dimensions entries must be positive integers")
    expected_size = 1
    for dim in dimensions:
        expected_size *= dim

    if payload.get("compressed"):
        rle_data = payload.get("rle_data")
        if not isinstance(rle_data, list) or not all(_is_int(v) for v in rle_data):
            raise ValueError("snapshot.rle_data must be a list of integers")
        grid_length = len(rle_decode(rle_data))
    else:
        grid_data = payload.get("grid_data")
        if not isinstance(grid_data, list):
            raise ValueError("snapshot.grid_data must be a list")
        if not all(_is_int(v) and 0 <= v <= MAX_CELL_VALUE for v in grid_data):
            raise ValueError(f"snapshot.grid_data values must be integers in [0, {MAX_CELL_VALUE}]")
        grid_length = len(grid_data)
    if grid_length != expected_size:
        raise ValueError(
            f"snapshot grid holds {grid_length} cells, dimensions require {expected_size}"
        )

    history = payload.get("metrics_history")
    if not isinstance(history, list):
        raise ValueError("snapshot.metrics_history must be a list of objects")
    for i, entry in enumerate(history):
        _validate_metrics_entry(i, entry)

    _validate_snapshot_config(payload.get("config"))


def snapshot_from_dict(payload: Mapping[str, Any]) -> ExperimentSnapshot:
    """Validate and rebuild a snapshot (compressed or not)."""
    validate_snapshot(payload)
    if payload.get("compressed"):
        grid_data = rle_decode(payload["rle_data"])
    else:
        grid_data = bytes(payload["grid_data"])
    try:
        history = tuple(_metrics_from_dict(m) for m in payload["metrics_history"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"snapshot.metrics_history entry is malformed: {exc}") from exc
    try:
        config = ExperimentConfig.from_dict(payload["config"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"snapshot.config is malformed: {exc}") from exc
    return ExperimentSnapshot(
        id=payload["id"],
        timestamp=payload["timestamp"],
        steps_taken=payload["steps_taken"],
        dimensions=tuple(payload["dimensions"]),
        grid_data=grid_data,
        config=config,
        metrics_history=history,
    )


def save_snapshot(snapshot: ExperimentSnapshot, path: Path, compress: bool = False) -> Path:
    """Write a snapshot as JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot.to_dict(compress=compress), ensure_ascii=False, indent=2))
    logger.info("saved snapshot %s at step %d to %s", snapshot.id, snapshot.steps_taken, path)
    return path


def load_snapshot(path: Path) -> ExperimentSnapshot:
    """Read and validate a snapshot written by :func:`save_snapshot`."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"snapshot file is not valid JSON: {path}: {exc}") from exc
    snapshot = snapshot_from_dict(payload)
    logger.info("loaded snapshot %s at step %d from %s", snapshot.id, snapshot.steps_taken, path)
    return snapshot


# ---------------------------------------------------------------------------
# Restore / resume
# ---------------------------------------------------------------------------


def restore_grid(snapshot: ExperimentSnapshot) -> Grid:
    """Rebuild the grid byte-for-byte."""
    return Grid.from_data(snapshot.dimensions, snapshot.grid_data)


def resume_from_snapshot(
    snapshot: ExperimentSnapshot,
    additional_steps: int,
    rule: Rule | None = None,
) -> EvolutionResult:
    """Continue a run for ``additional_steps`` more generations.

    Without ``rule`` the rule is rebuilt from the snapshot's config. A given
    rule must be normalised against the same neighbour count as the
    snapshot's neighbourhood. The returned history is the snapshot's history
    followed by the new records, whose step numbers continue from
    ``snapshot.steps_taken``.
    """
    config = snapshot.config
    max_neighbors = max_neighbor_count(
        snapshot.dimensions, config.neighborhood.type, config.neighborhood.range
    )
    if rule is None:
        rule = rule_from_thresholds(list(config.birth), list(config.survival), max_neighbors)
    elif rule.max_neighbors != max_neighbors:
        raise ValueError(
            f"rule.max_neighbors {rule.max_neighbors} does not match the snapshot "
            f"neighborhood ({max_neighbors})"
        )
    neighborhood = generate_neighborhood(
        snapshot.dimensions, config.neighborhood.type, config.neighborhood.range
    )
    continued = evolve_enhanced(
        restore_grid(snapshot),
        rule,
        neighborhood,
        steps=additional_steps,
        metrics_interval=config.metrics_interval,
        start_step=snapshot.steps_taken,
    )
    return EvolutionResult(
        final_grid=continued.final_grid,
        metrics_history=[*snapshot.metrics_history, *continued.metrics_history],
    )


def evolve_with_snapshots(
    grid: Grid,
    rule: Rule,
    config: ExperimentConfig,
    snapshot_interval: int,
    on_snapshot: Callable[[ExperimentSnapshot], None] | None = None,
) -> tuple[EvolutionResult, list[ExperimentSnapshot]]:
    """Run ``config.steps`` generations, snapshotting every ``snapshot_interval`` steps."""
    if snapshot_interval < 1:
        raise ValueError("snapshot_interval must be >= 1")
    neighborhood = generate_neighborhood(
        grid.dimensions, config.neighborhood.type, config.neighborhood.range
    )
    stepper = Stepper(grid, rule, neighborhood)
    history: list[Metrics] = []
    snapshots: list[ExperimentSnapshot] = []
    for _ in range(config.steps):
        if (stepper.step_count + 1) % config.metrics_interval == 0:
            history.append(stepper.step_enhanced())
        else:
            stepper.advance()
        if stepper.step_count % snapshot_interval == 0:
            snapshot = create_snapshot(stepper.current_grid, stepper.step_count, history, config)
            snapshots.append(snapshot)
            if on_snapshot is not None:
                on_snapshot(snapshot)
    result = EvolutionResult(final_grid=stepper.current_grid.clone(), metrics_history=history)
    return result, snapshots
