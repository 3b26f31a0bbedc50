"""
FastAPI dependencies.
"""

from datetime import datetime
from typing import Callable, Generator
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.services.suggestion_registry import SuggestionRegistry
from app.services.time_service import utc_now


# One registry per process; it is the only shared mutable state of the detector
_registry = SuggestionRegistry()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_registry() -> SuggestionRegistry:
    """Dependency for the process-wide suggestion registry."""
    return _registry


def get_clock() -> Callable[[], datetime]:
    """Dependency for the current-time source (naive UTC)."""
    return utc_now
