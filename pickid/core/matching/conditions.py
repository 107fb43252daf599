"""
Match condition parsing and evaluation.

``parse_match_condition`` is the single place where stored ``match_conditions``
JSON is turned into a typed condition. Historical records spell score bounds
either ``min``/``max`` or ``min_score``/``max_score``; the legacy spelling is
mapped here (controlled by ``MATCH_ACCEPT_LEGACY_SCORE_FIELDS``) so nothing
downstream has to know about it.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from libs.domain_types import MatchConditionType
from pickid.core.config import settings

from ._types import (
    CodeCondition,
    MatchCondition,
    Number,
    Result,
    ScoreCondition,
    UnrecognizedCondition,
)

logger = logging.getLogger(__name__)

_condition_adapter: TypeAdapter[MatchCondition] = TypeAdapter(MatchCondition)

_LEGACY_SCORE_FIELDS = {"min_score": "min", "max_score": "max"}

# Stored column name -> Result field name
_RESULT_RECORD_FIELDS = {
    "result_name": "name",
    "result_order": "order",
    "match_conditions": "match_condition",
}


def parse_match_condition(
    raw: Any, *, accept_legacy_fields: Optional[bool] = None
) -> Optional[MatchCondition]:
    """
    Turn a stored match condition into a typed condition.

    Args:
        raw: Condition as stored (mapping), an already-typed condition, or None
        accept_legacy_fields: Map ``min_score``/``max_score`` onto ``min``/``max``.
            Defaults to settings.MATCH_ACCEPT_LEGACY_SCORE_FIELDS.

    Returns:
        ScoreCondition, CodeCondition, UnrecognizedCondition for any other
        shape, or None when no condition is stored
    """
    if raw is None:
        return None
    if isinstance(raw, (ScoreCondition, CodeCondition, UnrecognizedCondition)):
        return raw
    if not isinstance(raw, Mapping):
        return _unrecognized(raw, "not a mapping")

    if accept_legacy_fields is None:
        accept_legacy_fields = settings.MATCH_ACCEPT_LEGACY_SCORE_FIELDS

    data: Dict[str, Any] = dict(raw)
    if accept_legacy_fields:
        for legacy, current in _LEGACY_SCORE_FIELDS.items():
            if legacy not in data:
                continue
            value = data.pop(legacy)
            if data.get(current) is None:
                data[current] = value
        # Legacy score rows were written without a type
        if "type" not in data and ("min" in data or "max" in data):
            data["type"] = MatchConditionType.SCORE.value

    try:
        return _condition_adapter.validate_python(data)
    except ValidationError as e:
        return _unrecognized(raw, f"{e.error_count()} validation error(s)")


def _unrecognized(raw: Any, reason: str) -> UnrecognizedCondition:
    logger.warning(f"Unrecognized match condition ({reason}); it will never match: {raw!r}")
    return UnrecognizedCondition(raw=raw)


def result_from_record(
    record: Any, *, accept_legacy_fields: Optional[bool] = None
) -> Result:
    """
    Build a Result from a stored ``test_results`` record.

    Accepts the store's column names (``result_name``, ``result_order``,
    ``match_conditions``) as well as the Result field names. Existing Result
    instances are returned unchanged.
    """
    if isinstance(record, Result):
        return record

    data: Dict[str, Any] = dict(record)
    for column, field_name in _RESULT_RECORD_FIELDS.items():
        if column in data:
            value = data.pop(column)
            data.setdefault(field_name, value)

    data["match_condition"] = parse_match_condition(
        data.get("match_condition"), accept_legacy_fields=accept_legacy_fields
    )
    return Result.model_validate(data)


def evaluate_condition(
    condition: Optional[MatchCondition],
    score: Number,
    dominant_codes: Sequence[str],
) -> bool:
    """
    Decide whether a single condition qualifies.

    - Score condition: ``min <= score <= max``.
    - Single-code condition: the code must be the most frequent one
      (``dominant_codes[0]``); merely being present is not enough.
    - Multi-code condition: always False here. Combinations are compared
      against the full code sequence by the matcher's strategy chain.
    - No condition or an unrecognized one: False.

    Never raises.
    """
    if isinstance(condition, ScoreCondition):
        return condition.contains(score)
    if isinstance(condition, CodeCondition):
        if not condition.is_single or not dominant_codes:
            return False
        return condition.codes[0] == dominant_codes[0]
    return False
