"""Visualization layer: metric timelines and grid slice images."""

from nd_automata.viz.render import render_grid_slice, render_metric_timeline

__all__ = [
    "render_grid_slice",
    "render_metric_timeline",
]
