"""Centralized domain constants for cellular-automaton experiments.

All magic numbers that appear across multiple modules are defined here.
Consuming modules should import from this module rather than defining
their own inline literals.
"""

from __future__ import annotations

DEFAULT_DIMENSIONS: tuple[int, ...] = (20, 20)
"""Default grid shape (2-D, 20x20)."""

DEFAULT_STEPS = 100
"""Default number of evolution steps."""

DEFAULT_SEED = 42
"""Default seed for the initial-state generator."""

DEFAULT_DENSITY = 0.3
"""Default fraction of cells alive at initialisation."""

DEFAULT_METRICS_INTERVAL = 1
"""Default sampling interval for the metrics history."""

DEFAULT_RANGE = 1
"""Default neighbourhood range."""

DEAD = 0
"""Cell value for a dead cell."""

ALIVE = 1
"""Cell value for a live cell."""

MAX_CELL_VALUE = 255
"""Largest value a grid cell can hold (uint8 buffer)."""

FNV_OFFSET_BASIS = 2_166_136_261
"""32-bit FNV-1a offset basis used to seed the state fingerprint."""

FNV_PRIME = 16_777_619
"""32-bit FNV-1a prime."""

UINT32_MASK = 0xFFFFFFFF
"""Mask for 32-bit wraparound arithmetic."""

LCG_MULTIPLIER = 1_664_525
"""Multiplier of the seeded linear congruential generator."""

LCG_INCREMENT = 1_013_904_223
"""Increment of the seeded linear congruential generator."""

LCG_MODULUS = 2**32
"""Modulus of the seeded linear congruential generator."""

# ---------------------------------------------------------------------------
# Classifier thresholds
# ---------------------------------------------------------------------------

TREND_WINDOW_START = 0.7
"""Trends use samples from floor(len * TREND_WINDOW_START) to the end."""

EARLY_WINDOW_END = 0.3
"""Explosive-growth check: early samples end at floor(len * EARLY_WINDOW_END)."""

LATE_WINDOW_START = 0.7
"""Explosive-growth check: late samples start at floor(len * LATE_WINDOW_START)."""

CYCLE_WINDOW_FRACTION = 0.5
"""Trailing fraction of the history searched for fingerprint cycles."""

CYCLE_WINDOW_MIN = 10
"""Minimum number of samples searched for fingerprint cycles."""

POPULATION_COV_THRESHOLD = 0.3
"""Coefficient of variation above which population is 'oscillating'."""

POPULATION_TREND_STRENGTH = 0.6
"""Increase/decrease imbalance above which population is directional."""

ENTROPY_STDDEV_THRESHOLD = 0.1
"""Entropy standard deviation above which entropy is 'fluctuating'."""

ENTROPY_DEADBAND = 0.001
"""Entropy changes smaller than this are ignored when counting moves."""

ENTROPY_INCREASING_RATIO = 0.7
"""Increasing-move ratio above which the entropy trend is increasing."""

ENTROPY_DECREASING_RATIO = 0.3
"""Increasing-move ratio below which the entropy trend is decreasing."""

CHAOS_ENTROPY_VARIANCE = 0.02
"""Whole-history entropy variance above which fluctuation reads as chaos."""

EXPLOSIVE_GROWTH_RATIO = 1.5
"""Late/early mean population ratio that marks explosive growth."""

EDGE_OF_CHAOS_ENTROPY_LOW = 0.3
"""Lower (exclusive) mean-entropy bound for the edge-of-chaos class."""

EDGE_OF_CHAOS_ENTROPY_HIGH = 0.8
"""Upper (exclusive) mean-entropy bound for the edge-of-chaos class."""

EDGE_OF_CHAOS_MIN_HISTORY = 50
"""Minimum history length before the edge-of-chaos class is considered."""

CONFIDENCE_EXTINCT = 1.0
CONFIDENCE_HOMOGENEOUS = 0.95
CONFIDENCE_FIXED_POINT = 0.95
CONFIDENCE_PERIODIC = 0.9
CONFIDENCE_CHAOTIC = 0.75
CONFIDENCE_EXPLOSIVE = 0.8
CONFIDENCE_EDGE_OF_CHAOS = 0.5
CONFIDENCE_DEFAULT = 0.7

# ---------------------------------------------------------------------------
# Persistence / batch limits
# ---------------------------------------------------------------------------

FLUSH_THRESHOLD = 8_192
"""Flush metrics rows to Parquet once this in-memory row count is reached."""

MAX_SWEEP_WORK_UNITS = 5_000_000_000
"""Safety cap on total cell updates (seeds * steps * cells) in one sweep."""

RLE_MAX_RUN = 255
"""Longest run stored in one run-length-encoded snapshot pair."""
