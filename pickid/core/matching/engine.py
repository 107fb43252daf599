"""
Result matching engine facade.

``resolve_result`` is the one entry point the test-taking flow calls once a
session is finished. It owns no state and performs no I/O: the caller passes
the test's results (and optionally its questions) together with the answers.

``ResultMatchingEngine`` is the same thing for callers that only hold a test
id; it reads the test definition from an injected ResultRepository first.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ._types import Answer, MatchOutcome, Question, Result, TestDefinition
from .aggregation import AnswerLike, aggregate_score, as_answers
from .conditions import result_from_record
from .exceptions import NoResultsDefinedError
from .matcher import match_with_outcome
from .repository import ResultRepository

logger = logging.getLogger(__name__)

TestLike = Union[TestDefinition, Mapping[str, Any]]


def load_test_definition(test: TestLike) -> TestDefinition:
    """Normalise a test definition given as a mapping of raw records."""
    if isinstance(test, TestDefinition):
        return test
    return TestDefinition(
        id=test.get("id"),
        results=[result_from_record(r) for r in test.get("results") or []],
        questions=[
            q if isinstance(q, Question) else Question.model_validate(q)
            for q in test.get("questions") or []
        ],
    )


def hydrate_answers(
    questions: Sequence[Question], answers: Iterable[AnswerLike]
) -> List[Answer]:
    """
    Fill in score and code from the chosen choice where the answer lacks them.

    Answers that already carry a score or code keep it. Answers pointing at
    an unknown choice are returned unchanged.
    """
    answer_list = as_answers(answers)
    choices = {str(choice.id): choice for q in questions for choice in q.choices}
    if not choices:
        return answer_list

    hydrated: List[Answer] = []
    for answer in answer_list:
        choice = choices.get(str(answer.choice_id)) if answer.choice_id is not None else None
        if choice is None:
            hydrated.append(answer)
            continue
        updates = {}
        if answer.score is None and choice.score is not None:
            updates["score"] = choice.score
        if answer.code is None and choice.code is not None:
            updates["code"] = choice.code
        hydrated.append(answer.model_copy(update=updates) if updates else answer)
    return hydrated


def resolve_outcome(
    test: TestLike,
    answers: Iterable[AnswerLike],
    gender: Optional[str] = None,
) -> Optional[MatchOutcome]:
    """Resolve a result and report which matching step produced it."""
    definition = load_test_definition(test)
    hydrated = hydrate_answers(definition.questions, answers)
    score = aggregate_score(hydrated)

    outcome = match_with_outcome(definition.results, score, hydrated, gender)
    if outcome is None:
        logger.warning(
            "Test has no defined results; nothing to resolve",
            extra={"test_id": definition.id},
        )
        return None

    logger.debug(
        f"Resolved result {outcome.result.id!r} via {outcome.strategy.value}",
        extra={
            "test_id": definition.id,
            "result_id": outcome.result.id,
            "strategy": outcome.strategy.value,
            "candidate_count": outcome.candidate_count,
            "score": score,
        },
    )
    return outcome


def resolve_result(
    test: TestLike,
    answers: Iterable[AnswerLike],
    gender: Optional[str] = None,
) -> Optional[Result]:
    """
    Resolve the single result a user receives for a completed test.

    Args:
        test: TestDefinition, or a mapping with ``results`` (stored records
            or Result models) and optional ``questions``
        answers: Completed answers in answer order
        gender: Optional user gender for result targeting

    Returns:
        The matched Result; None only when the test has no results

    Example:
        >>> resolve_result(
        ...     {"results": [{"id": 1, "match_conditions": {"type": "score", "min": 0, "max": 10}}]},
        ...     [{"score": 5}, {"score": 3}, {"score": 2}],
        ... ).id
        1
    """
    outcome = resolve_outcome(test, answers, gender)
    return outcome.result if outcome is not None else None


class ResultMatchingEngine:
    """
    Resolves results for tests fetched through a ResultRepository.

    Usage:
        engine = ResultMatchingEngine(SqlAlchemyResultRepository(db))
        result = engine.resolve_for_test(test_id, answers, gender="female")
    """

    def __init__(self, repository: ResultRepository):
        self._repository = repository

    def load(self, test_id: Any) -> TestDefinition:
        """Read the test's results and questions from the repository."""
        return TestDefinition(
            id=test_id,
            results=self._repository.get_results_for_test(test_id),
            questions=self._repository.get_questions_for_test(test_id),
        )

    def resolve_outcome_for_test(
        self,
        test_id: Any,
        answers: Iterable[AnswerLike],
        gender: Optional[str] = None,
        *,
        require_result: bool = False,
    ) -> Optional[MatchOutcome]:
        outcome = resolve_outcome(self.load(test_id), answers, gender)
        if outcome is None and require_result:
            raise NoResultsDefinedError(test_id)
        return outcome

    def resolve_for_test(
        self,
        test_id: Any,
        answers: Iterable[AnswerLike],
        gender: Optional[str] = None,
        *,
        require_result: bool = False,
    ) -> Optional[Result]:
        """
        Resolve the result for ``test_id``.

        Raises:
            NoResultsDefinedError: If require_result is set and the test has
                no results
        """
        outcome = self.resolve_outcome_for_test(
            test_id, answers, gender, require_result=require_result
        )
        return outcome.result if outcome is not None else None
