"""
Read-only access to test definitions for the result matching engine.

The engine never talks to the store directly; a ResultRepository is passed
in so that matching stays pure and can be tested without a live backend.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from pickid.models.models import TestChoice, TestQuestion, TestResultDefinition

from ._types import Choice, Question, Result
from .conditions import result_from_record

logger = logging.getLogger(__name__)


class ResultRepository(Protocol):
    """Source of a test's candidate results and questions."""

    def get_results_for_test(self, test_id: Any) -> List[Result]:
        """All results of the test, in the author's order."""
        ...

    def get_questions_for_test(self, test_id: Any) -> List[Question]:
        """All questions of the test with their choices, in display order."""
        ...


class InMemoryResultRepository:
    """
    Dictionary-backed repository.

    Used for tests and for callers that already hold the records, e.g. a
    cached test payload.
    """

    def __init__(self) -> None:
        self._results: Dict[str, List[Result]] = {}
        self._questions: Dict[str, List[Question]] = {}

    def add_test(
        self,
        test_id: Any,
        results: Iterable[Any],
        questions: Iterable[Any] = (),
    ) -> None:
        """Register a test from stored records or models."""
        self._results[str(test_id)] = sorted(
            (result_from_record(r) for r in results), key=lambda r: r.order
        )
        self._questions[str(test_id)] = sorted(
            (
                q if isinstance(q, Question) else Question.model_validate(q)
                for q in questions
            ),
            key=lambda q: q.order,
        )

    def get_results_for_test(self, test_id: Any) -> List[Result]:
        return list(self._results.get(str(test_id), []))

    def get_questions_for_test(self, test_id: Any) -> List[Question]:
        return list(self._questions.get(str(test_id), []))


class SqlAlchemyResultRepository:
    """
    Repository over the platform's ``test_results``, ``test_questions`` and
    ``test_choices`` tables.

    Usage:
        with SessionLocal() as db:
            repo = SqlAlchemyResultRepository(db)
            results = repo.get_results_for_test(test_id)

    Database errors are not caught here; they propagate to the caller.
    """

    def __init__(self, db: Session, *, accept_legacy_fields: Optional[bool] = None):
        self._db = db
        self._accept_legacy_fields = accept_legacy_fields

    def get_results_for_test(self, test_id: Any) -> List[Result]:
        stmt = (
            select(TestResultDefinition)
            .where(TestResultDefinition.test_id == test_id)
            .order_by(TestResultDefinition.result_order, TestResultDefinition.id)
        )
        rows = self._db.execute(stmt).scalars().all()
        logger.debug(f"Loaded {len(rows)} results for test {test_id}")
        return [
            result_from_record(
                _result_row_to_record(row),
                accept_legacy_fields=self._accept_legacy_fields,
            )
            for row in rows
        ]

    def get_questions_for_test(self, test_id: Any) -> List[Question]:
        stmt = (
            select(TestQuestion)
            .options(selectinload(TestQuestion.choices))
            .where(TestQuestion.test_id == test_id)
            .order_by(TestQuestion.question_order, TestQuestion.id)
        )
        rows = self._db.execute(stmt).scalars().all()
        return [_question_from_row(row) for row in rows]


def _result_row_to_record(row: TestResultDefinition) -> Mapping[str, Any]:
    return {
        "id": row.id,
        "result_name": row.result_name,
        "description": row.description,
        "result_order": row.result_order,
        "match_conditions": row.match_conditions,
        "target_gender": row.target_gender,
        "emoji": row.emoji,
        "theme_color": row.theme_color,
        "features": row.features,
        "keywords": row.keywords,
        "jobs": row.jobs,
        "background_image_url": row.background_image_url,
        "share_image_url": row.share_image_url,
        "percentage": row.percentage,
    }


def _choice_from_row(row: TestChoice) -> Choice:
    return Choice(
        id=row.id,
        text=row.choice_text or "",
        order=row.choice_order or 0,
        score=row.score,
        code=row.code,
    )


def _question_from_row(row: TestQuestion) -> Question:
    choices = sorted(row.choices, key=lambda c: (c.choice_order or 0, c.id))
    return Question(
        id=row.id,
        text=row.question_text or "",
        order=row.question_order or 0,
        choices=[_choice_from_row(c) for c in choices],
    )
