"""Database session management."""

from typing import Generator

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.db.engine import engine


def create_session_factory(bind: Engine) -> sessionmaker[Session]:
    """Sessions for the store blobs; loaded payloads stay readable after commit."""
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session (readiness probe)."""
    with SessionLocal() as db:
        yield db
