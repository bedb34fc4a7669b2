"""Static figures for automaton runs: metric timelines and grid slices."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import ListedColormap

from nd_automata.analysis.classifier import ClassificationResult
from nd_automata.domain.grid import Grid
from nd_automata.domain.slicer import extract_slice
from nd_automata.simulation.step import EnhancedMetrics, Metrics

DEAD_COLOR = "#f4f1ea"
ALIVE_COLOR = "#1f3b4d"
POPULATION_COLOR = "tab:blue"
ENTROPY_COLOR = "tab:orange"

_CELL_CMAP = ListedColormap([DEAD_COLOR, ALIVE_COLOR])


def _title_for(classification: ClassificationResult | None, fallback: str) -> str:
    if classification is None:
        return fallback
    return (
        f"{classification.outcome.value} / {classification.wolfram_class.value} "
        f"(confidence {classification.confidence:.2f})"
    )


def _save(fig: plt.Figure, output_path: Path, dpi: int) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi)
    plt.close(fig)
    return output_path


# ---------------------------------------------------------------------------
# render_metric_timeline
# ---------------------------------------------------------------------------


def render_metric_timeline(
    history: Sequence[Metrics],
    output_path: Path,
    classification: ClassificationResult | None = None,
) -> Path:
    """Population (left axis) and entropy (right axis) against step.

    The entropy curve is drawn only when the history carries enhanced
    metrics.
    """
    fig, ax = plt.subplots(figsize=(8, 4))
    steps = [m.step for m in history]
    ax.plot(steps, [m.population for m in history], color=POPULATION_COLOR, linewidth=1.6)
    ax.set_xlabel("Step")
    ax.set_ylabel("Population", color=POPULATION_COLOR)
    ax.grid(True, alpha=0.3)

    enhanced = [m for m in history if isinstance(m, EnhancedMetrics)]
    if enhanced and len(enhanced) == len(history):
        ax2 = ax.twinx()
        ax2.plot(steps, [m.entropy for m in enhanced], color=ENTROPY_COLOR, linewidth=1.2)
        ax2.set_ylabel("Entropy (bits)", color=ENTROPY_COLOR)
        ax2.set_ylim(0.0, 1.05)

    ax.set_title(_title_for(classification, "Metrics timeline"))
    fig.tight_layout()
    return _save(fig, output_path, dpi=150)


# ---------------------------------------------------------------------------
# render_grid_slice
# ---------------------------------------------------------------------------


def render_grid_slice(
    grid: Grid,
    output_path: Path,
    axis1: int = 0,
    axis2: int = 1,
    fixed_coords: Mapping[int, int] | None = None,
    title: str | None = None,
) -> Path:
    """Alive/dead image of one 2-D cross-section of the grid.

    A 1-D grid is drawn as a single row.
    """
    if grid.ndim == 1:
        plane = grid.view().reshape(1, -1)
    else:
        plane = extract_slice(grid, axis1, axis2, fixed_coords)
    alive = (plane == 1).astype(np.uint8)

    fig, ax = plt.subplots(figsize=(5, 5))
    ax.imshow(alive, cmap=_CELL_CMAP, vmin=0, vmax=1, interpolation="nearest")
    ax.set_xticks([])
    ax.set_yticks([])
    if grid.ndim > 1:
        ax.set_xlabel(f"axis {axis2}")
        ax.set_ylabel(f"axis {axis1}")
    ax.set_title(title or f"{'x'.join(str(d) for d in grid.dimensions)} slice")
    fig.tight_layout()
    return _save(fig, output_path, dpi=150)
