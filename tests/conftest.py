"""
Pytest configuration and shared fixtures for testing.
"""
import sys
from pathlib import Path

# Add project root to path so libs/ is importable (matches CI PYTHONPATH config)
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from typing import Iterator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from pickid.models import (  # noqa: E402
    Base,
    Test,
    TestChoice,
    TestQuestion,
    TestResultDefinition,
)


# SQLite file relative to this module, so the .db lands inside tests/
# regardless of the working directory.
_TEST_DB = Path(__file__).parent / "test.db"
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Iterator[Session]:
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mbti_test(db_session):
    """
    Create a two-question code test with three results in the database.

    Question 1 offers E/I, question 2 offers N/S. Results: "EN" (exact
    combination), "I" (single code), and a female-only "S" result.
    """
    test = Test(id="test-mbti", title="Mini type test", slug="mini-type", status="published")
    db_session.add(test)

    q1 = TestQuestion(id="q1", test_id=test.id, question_text="Party?", question_order=1)
    q2 = TestQuestion(id="q2", test_id=test.id, question_text="Ideas?", question_order=2)
    db_session.add_all([q1, q2])
    db_session.add_all(
        [
            TestChoice(id="c1e", question_id="q1", choice_text="Yes", choice_order=1, score=2, code="E"),
            TestChoice(id="c1i", question_id="q1", choice_text="No", choice_order=2, score=0, code="I"),
            TestChoice(id="c2n", question_id="q2", choice_text="Big picture", choice_order=1, score=1, code="N"),
            TestChoice(id="c2s", question_id="q2", choice_text="Details", choice_order=2, score=3, code="S"),
        ]
    )
    db_session.add_all(
        [
            TestResultDefinition(
                id="r-en",
                test_id=test.id,
                result_name="Campaigner",
                result_order=1,
                match_conditions={"type": "code", "codes": ["E", "N"]},
            ),
            TestResultDefinition(
                id="r-i",
                test_id=test.id,
                result_name="Thinker",
                result_order=2,
                match_conditions={"type": "code", "codes": ["I"]},
            ),
            TestResultDefinition(
                id="r-s-female",
                test_id=test.id,
                result_name="Guardian",
                result_order=3,
                match_conditions={"type": "code", "codes": ["S"]},
                target_gender="female",
            ),
        ]
    )
    db_session.commit()
    return test


@pytest.fixture
def score_test(db_session):
    """
    Create a score test whose results use both field-name spellings.
    """
    test = Test(id="test-score", title="Stress check", slug="stress-check", status="published")
    db_session.add(test)
    db_session.add_all(
        [
            # Inserted out of order to check result_order is respected
            TestResultDefinition(
                id="r-high",
                test_id=test.id,
                result_name="High",
                result_order=3,
                match_conditions={"type": "score", "min": 11},
            ),
            TestResultDefinition(
                id="r-low",
                test_id=test.id,
                result_name="Low",
                result_order=1,
                match_conditions={"min_score": 0, "max_score": 5},
            ),
            TestResultDefinition(
                id="r-mid",
                test_id=test.id,
                result_name="Medium",
                result_order=2,
                match_conditions={"type": "score", "min": 6, "max": 10},
            ),
        ]
    )
    db_session.commit()
    return test
