"""
Tests for match condition parsing and evaluation.
"""

import logging

import pytest

from pickid.core.matching import (
    CodeCondition,
    ScoreCondition,
    UnrecognizedCondition,
    evaluate_condition,
    match_result,
    parse_match_condition,
    result_from_record,
)


class TestParseMatchCondition:
    """Tests for parse_match_condition."""

    def test_none_is_no_condition(self):
        assert parse_match_condition(None) is None

    def test_score_condition(self):
        condition = parse_match_condition({"type": "score", "min": 3, "max": 9})

        assert condition == ScoreCondition(min=3, max=9)

    def test_score_defaults(self):
        """Missing min defaults to 0, missing max is unbounded."""
        condition = parse_match_condition({"type": "score"})

        assert isinstance(condition, ScoreCondition)
        assert condition.min == 0
        assert condition.max is None

    def test_null_min_is_zero(self):
        condition = parse_match_condition({"type": "score", "min": None, "max": 4})

        assert condition.min == 0

    def test_code_condition(self):
        condition = parse_match_condition({"type": "code", "codes": ["E", "N"]})

        assert condition == CodeCondition(codes=["E", "N"])
        assert not condition.is_single

    def test_legacy_field_names_are_mapped(self):
        condition = parse_match_condition(
            {"type": "score", "min_score": 10, "max_score": 20},
            accept_legacy_fields=True,
        )

        assert condition == ScoreCondition(min=10, max=20)

    def test_legacy_rows_without_type_are_score_conditions(self):
        condition = parse_match_condition(
            {"min_score": 0, "max_score": 5}, accept_legacy_fields=True
        )

        assert condition == ScoreCondition(min=0, max=5)

    def test_current_names_win_over_legacy_names(self):
        condition = parse_match_condition(
            {"type": "score", "min": 1, "min_score": 50, "max": 2, "max_score": 60},
            accept_legacy_fields=True,
        )

        assert condition == ScoreCondition(min=1, max=2)

    def test_legacy_names_unrecognized_when_disabled(self):
        """Unmapped bounds must not widen into an open-ended range."""
        condition = parse_match_condition(
            {"type": "score", "min_score": 10, "max_score": 20},
            accept_legacy_fields=False,
        )

        assert isinstance(condition, UnrecognizedCondition)

    def test_unmapped_legacy_row_does_not_win(self):
        results = [
            result_from_record(
                {"id": "legacy", "match_conditions": {"type": "score", "min_score": 50, "max_score": 60}},
                accept_legacy_fields=False,
            ),
            result_from_record(
                {"id": "low", "match_conditions": {"type": "score", "min": 0, "max": 10}}
            ),
        ]

        assert match_result(results, 3, [{"score": 3}]).id == "low"

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "score", "minimum": 5},
            {"type": "score", "min": 1, "max": 2, "maxx": 9},
            {"type": "code", "codes": ["A"], "weight": 2},
        ],
    )
    def test_unknown_keys_are_unrecognized(self, raw):
        assert isinstance(parse_match_condition(raw), UnrecognizedCondition)

    def test_legacy_untyped_row_unrecognized_when_disabled(self):
        condition = parse_match_condition(
            {"min_score": 0, "max_score": 5}, accept_legacy_fields=False
        )

        assert isinstance(condition, UnrecognizedCondition)

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "percentile", "value": 90},
            {"codes": ["A"]},
            {"type": "code", "codes": []},
            {"type": "code", "codes": "A"},
            {"type": "score", "min": "low"},
            ["A", "B"],
            "score",
            42,
        ],
    )
    def test_malformed_shapes_are_unrecognized(self, raw):
        condition = parse_match_condition(raw)

        assert isinstance(condition, UnrecognizedCondition)
        assert condition.raw == raw

    def test_malformed_shape_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pickid.core.matching.conditions"):
            parse_match_condition({"type": "mystery"})

        assert "Unrecognized match condition" in caplog.text

    def test_typed_condition_passes_through(self):
        condition = CodeCondition(codes=["A"])
        assert parse_match_condition(condition) is condition


class TestEvaluateCondition:
    """Tests for evaluate_condition."""

    def test_score_within_bounds(self):
        condition = ScoreCondition(min=0, max=10)

        assert evaluate_condition(condition, 10, [])
        assert evaluate_condition(condition, 0, [])
        assert evaluate_condition(condition, 5, [])

    def test_score_outside_bounds(self):
        condition = ScoreCondition(min=0, max=10)

        assert not evaluate_condition(condition, 11, [])
        assert not evaluate_condition(condition, -1, [])

    def test_unbounded_max(self):
        assert evaluate_condition(ScoreCondition(min=50), 10_000, [])

    def test_inverted_range_never_matches(self):
        condition = ScoreCondition(min=10, max=5)

        assert not any(evaluate_condition(condition, s, []) for s in range(0, 20))

    def test_single_code_matches_dominant(self):
        assert evaluate_condition(CodeCondition(codes=["A"]), 0, ["A", "B"])

    def test_single_code_present_but_not_dominant(self):
        assert not evaluate_condition(CodeCondition(codes=["B"]), 0, ["A", "B"])

    def test_single_code_without_codes(self):
        assert not evaluate_condition(CodeCondition(codes=["A"]), 0, [])

    def test_multi_code_is_left_to_the_matcher(self):
        assert not evaluate_condition(CodeCondition(codes=["A", "B"]), 0, ["A", "B"])

    def test_none_and_unrecognized_never_match(self):
        assert not evaluate_condition(None, 5, ["A"])
        assert not evaluate_condition(UnrecognizedCondition(raw={"x": 1}), 5, ["A"])


class TestResultFromRecord:
    """Tests for result_from_record."""

    def test_maps_store_columns(self):
        result = result_from_record(
            {
                "id": "r1",
                "result_name": "Explorer",
                "result_order": 2,
                "description": "Curious",
                "match_conditions": {"type": "code", "codes": ["N"]},
                "target_gender": "Female",
                "features": ["bold"],
                "theme_color": "#ff0000",
            }
        )

        assert result.id == "r1"
        assert result.name == "Explorer"
        assert result.order == 2
        assert result.match_condition == CodeCondition(codes=["N"])
        assert result.target_gender == "female"
        assert result.features == ["bold"]
        assert result.theme_color == "#ff0000"

    def test_accepts_field_names(self):
        result = result_from_record(
            {"id": 7, "name": "Plain", "match_condition": {"type": "score", "max": 3}}
        )

        assert result.name == "Plain"
        assert result.match_condition == ScoreCondition(min=0, max=3)

    def test_null_order_and_condition(self):
        result = result_from_record({"id": 1, "result_name": "X", "result_order": None})

        assert result.order == 0
        assert result.match_condition is None

    def test_blank_target_gender_is_unrestricted(self):
        result = result_from_record({"id": 1, "target_gender": ""})

        assert result.target_gender is None
        assert result.is_open_to("male")
