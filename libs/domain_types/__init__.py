"""Shared domain types for Pickid services.

This package is the single source of truth for the enums used by the
result matching engine and by anything that stores or reports on its
output (stored match conditions, result targeting, analytics).

Usage:
    from libs.domain_types import MatchConditionType, TargetGender
"""

import enum


class MatchConditionType(str, enum.Enum):
    """Kinds of match condition a test result can carry."""

    SCORE = "score"
    CODE = "code"


class TargetGender(str, enum.Enum):
    """Audience a test result is restricted to."""

    MALE = "male"
    FEMALE = "female"
    ALL = "all"


class MatchStrategy(str, enum.Enum):
    """Step of the matching chain that selected a result."""

    SINGLE_CODE = "single_code"
    EXACT_COMBINATION = "exact_combination"
    REVERSED_COMBINATION = "reversed_combination"
    SUPERSET = "superset"
    PARTIAL_OVERLAP = "partial_overlap"
    SCORE_RANGE = "score_range"
    FALLBACK = "fallback"


__all__ = [
    "MatchConditionType",
    "TargetGender",
    "MatchStrategy",
]
