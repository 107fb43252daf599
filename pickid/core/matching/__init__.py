r"""
Test-result matching for Pickid quizzes and personality tests.

Given a user's answers to a completed test, picks the single predefined
result they receive. Results carry at most one match condition: a score
range or a list of type codes. Code-based tests are matched through a chain
of increasingly loose strategies, score-based tests by range, and when
nothing matches the first result is returned, so a test with at least one
result always produces an outcome.

Usage Example
-------------
Resolve a result from records the caller already fetched:

    from pickid.core.matching import resolve_result

    result = resolve_result(
        {"results": result_rows, "questions": question_rows},
        answers=[{"questionId": "q1", "choiceId": "c3"}, ...],
        gender="female",
    )
    if result is None:
        ...  # the test has no defined outcomes

Resolve through a repository and see which strategy fired:

    from pickid.core.matching import ResultMatchingEngine, SqlAlchemyResultRepository

    engine = ResultMatchingEngine(SqlAlchemyResultRepository(db))
    outcome = engine.resolve_outcome_for_test(test_id, answers)
    print(outcome.result.name, outcome.strategy.value)

Score and code summaries are also available on their own for reporting:

    from pickid.core.matching import aggregate_score, tally_codes
"""

# Type definitions
from ._types import (
    Answer,
    Choice,
    CodeCondition,
    CodeCount,
    MatchCondition,
    MatchOutcome,
    Question,
    Result,
    ScoreCondition,
    TestDefinition,
    UnrecognizedCondition,
)

# Exceptions
from .exceptions import NoResultsDefinedError, ResultMatchingError

# Score aggregation and code tally
from .aggregation import aggregate_score, code_sequence, dominant_codes, tally_codes

# Condition parsing and evaluation
from .conditions import evaluate_condition, parse_match_condition, result_from_record

# Strategy chain
from .matcher import (
    CODE_STRATEGIES,
    CodeEvidence,
    filter_by_gender,
    match_exact_combination,
    match_partial_overlap,
    match_result,
    match_reversed_combination,
    match_score_range,
    match_single_code,
    match_superset,
    match_with_outcome,
)

# Repositories
from .repository import (
    InMemoryResultRepository,
    ResultRepository,
    SqlAlchemyResultRepository,
)

# Facade
from .engine import (
    ResultMatchingEngine,
    hydrate_answers,
    load_test_definition,
    resolve_outcome,
    resolve_result,
)

__all__ = [
    # Type definitions
    "Answer",
    "Choice",
    "CodeCondition",
    "CodeCount",
    "MatchCondition",
    "MatchOutcome",
    "Question",
    "Result",
    "ScoreCondition",
    "TestDefinition",
    "UnrecognizedCondition",
    # Exceptions
    "NoResultsDefinedError",
    "ResultMatchingError",
    # Aggregation
    "aggregate_score",
    "code_sequence",
    "dominant_codes",
    "tally_codes",
    # Conditions
    "evaluate_condition",
    "parse_match_condition",
    "result_from_record",
    # Strategy chain
    "CODE_STRATEGIES",
    "CodeEvidence",
    "filter_by_gender",
    "match_exact_combination",
    "match_partial_overlap",
    "match_result",
    "match_reversed_combination",
    "match_score_range",
    "match_single_code",
    "match_superset",
    "match_with_outcome",
    # Repositories
    "InMemoryResultRepository",
    "ResultRepository",
    "SqlAlchemyResultRepository",
    # Facade
    "ResultMatchingEngine",
    "hydrate_answers",
    "load_test_definition",
    "resolve_outcome",
    "resolve_result",
]
