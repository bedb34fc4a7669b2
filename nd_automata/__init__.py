"""N-dimensional toroidal cellular automata with outcome classification."""

__version__ = "0.1.0"
