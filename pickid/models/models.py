"""
Database models for the tables the result engine reads.

Tests, their questions and choices, and their result definitions are
authored elsewhere; these mappings are used read-only.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import relationship

from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Test(Base):
    """A published quiz or personality test."""

    __tablename__ = "tests"
    __test__ = False  # not a pytest test class

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True)
    status = Column(String(20), default="draft", nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    questions = relationship(
        "TestQuestion", back_populates="test", cascade="all, delete-orphan"
    )
    results = relationship(
        "TestResultDefinition", back_populates="test", cascade="all, delete-orphan"
    )


class TestQuestion(Base):
    """One question of a test."""

    __tablename__ = "test_questions"
    __test__ = False

    id = Column(String(36), primary_key=True, default=_new_id)
    test_id = Column(
        String(36), ForeignKey("tests.id", ondelete="CASCADE"), index=True
    )
    question_text = Column(Text, nullable=False)
    question_order = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500))

    test = relationship("Test", back_populates="questions")
    choices = relationship(
        "TestChoice", back_populates="question", cascade="all, delete-orphan"
    )


class TestChoice(Base):
    """A selectable choice; carries the points and type code it contributes."""

    __tablename__ = "test_choices"
    __test__ = False

    id = Column(String(36), primary_key=True, default=_new_id)
    question_id = Column(
        String(36), ForeignKey("test_questions.id", ondelete="CASCADE"), index=True
    )
    choice_text = Column(Text, nullable=False)
    choice_order = Column(Integer, nullable=False, default=0)
    score = Column(Integer)  # null counts as 0
    code = Column(String(20))  # e.g. "E" / "I" for type tests; null for score tests

    question = relationship("TestQuestion", back_populates="choices")


class TestResultDefinition(Base):
    """A predefined outcome of a test, with its match condition."""

    __tablename__ = "test_results"
    __test__ = False

    id = Column(String(36), primary_key=True, default=_new_id)
    test_id = Column(String(36), ForeignKey("tests.id", ondelete="CASCADE"), index=True)
    result_name = Column(String(255), nullable=False)
    result_order = Column(Integer, nullable=False, default=0)
    description = Column(Text)
    # {"type": "score", "min": 0, "max": 10} or {"type": "code", "codes": ["E", "N"]}
    # Older rows use "min_score"/"max_score".
    match_conditions = Column(JSON)
    target_gender = Column(String(10))  # "male", "female", "all" or null

    # Display metadata
    emoji = Column(String(20))
    theme_color = Column(String(20))
    features = Column(JSON)
    keywords = Column(JSON)
    jobs = Column(JSON)
    background_image_url = Column(String(500))
    share_image_url = Column(String(500))
    percentage = Column(Float)

    test = relationship("Test", back_populates="results")
