"""Analysis layer: outcome classification."""

from nd_automata.analysis.classifier import (
    ClassificationDetails,
    ClassificationResult,
    Outcome,
    WolframClass,
    classify,
    classify_basic,
)

__all__ = [
    "ClassificationDetails",
    "ClassificationResult",
    "Outcome",
    "WolframClass",
    "classify",
    "classify_basic",
]
