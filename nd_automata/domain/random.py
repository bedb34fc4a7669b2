"""Seeded pseudo-random stream for deterministic grid initialisation."""

from __future__ import annotations

from nd_automata.config.constants import LCG_INCREMENT, LCG_MODULUS, LCG_MULTIPLIER


class SeededRandom:
    """32-bit linear congruential generator returning floats in [0, 1).

    Any object with a ``next() -> float`` method can stand in for this class
    wherever an initialisation stream is expected.
    """

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        if isinstance(seed, bool):
            raise ValueError("seed must be an integer")
        self._state = int(seed) % LCG_MODULUS

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS


def create_random(seed: int) -> SeededRandom:
    """Functional constructor matching the other ``create_*`` helpers."""
    return SeededRandom(seed)
