"""Configuration layer: constants and typed config dataclasses.

Only the constants are re-exported here because the domain layer imports
them at load time. Import the dataclasses from ``nd_automata.config.types``.
"""

from nd_automata.config.constants import (
    ALIVE,
    DEAD,
    DEFAULT_DENSITY,
    DEFAULT_DIMENSIONS,
    DEFAULT_METRICS_INTERVAL,
    DEFAULT_RANGE,
    DEFAULT_SEED,
    DEFAULT_STEPS,
    FLUSH_THRESHOLD,
    MAX_CELL_VALUE,
    MAX_SWEEP_WORK_UNITS,
    RLE_MAX_RUN,
)

__all__ = [
    "ALIVE",
    "DEAD",
    "DEFAULT_DENSITY",
    "DEFAULT_DIMENSIONS",
    "DEFAULT_METRICS_INTERVAL",
    "DEFAULT_RANGE",
    "DEFAULT_SEED",
    "DEFAULT_STEPS",
    "FLUSH_THRESHOLD",
    "MAX_CELL_VALUE",
    "MAX_SWEEP_WORK_UNITS",
    "RLE_MAX_RUN",
]
