"""
Database base configuration for SQLAlchemy models.

The engine only reads test definitions, so a plain synchronous engine and
session factory are all that is needed.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from pickid.core.config import settings

DATABASE_URL = settings.DATABASE_URL

# SQLite connections are not shareable across threads by default
_connect_args = (
    {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(
    DATABASE_URL,
    echo=settings.DB_ECHO,
    connect_args=_connect_args,
    pool_pre_ping=True,  # Verify connections are alive before using them
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all models."""


def get_db() -> Generator[Session, None, None]:
    """
    Yield a database session and close it afterwards.

    Usage:
        for db in get_db():
            repo = SqlAlchemyResultRepository(db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
