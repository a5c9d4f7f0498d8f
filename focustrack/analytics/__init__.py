"""
Analytics Module

Aggregate statistics over tracked subjects.
"""

from .attention import (
    DEFAULT_FOCUSED_LABELS,
    AttentionLevel,
    AttentionSummary,
    classify_level,
    is_focused,
    summarize,
)

__all__ = [
    "AttentionLevel",
    "AttentionSummary",
    "DEFAULT_FOCUSED_LABELS",
    "classify_level",
    "is_focused",
    "summarize",
]
