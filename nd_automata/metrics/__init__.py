"""Temporal analysis of metric series: cycles and trends."""
