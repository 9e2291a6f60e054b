"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: diversity/__init__.py.
"""

from .scorer import (
    DiversityConfig,
    DiversityReport,
    DiversityScorer,
    ResultSummary,
    item_descriptor,
    item_overlap,
    palette_overlap,
    score_diversity,
)

__all__ = [
    "DiversityConfig",
    "DiversityReport",
    "DiversityScorer",
    "ResultSummary",
    "item_descriptor",
    "item_overlap",
    "palette_overlap",
    "score_diversity",
]
