"""
Models package for the Pickid result engine.
"""
from .base import Base, engine, SessionLocal, get_db
from .models import (
    Test,
    TestQuestion,
    TestChoice,
    TestResultDefinition,
)

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "Test",
    "TestQuestion",
    "TestChoice",
    "TestResultDefinition",
]
