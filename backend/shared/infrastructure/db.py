"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns with a synchronous engine.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    """
    Pool settings per backend.
    SQLite (development, CLI) needs check_same_thread off because FastAPI
    runs sync routes in a threadpool.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 10,
        "max_overflow": 15,
        "pool_timeout": 30,  # Wait max 30s for connection from pool
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
    }


engine = create_engine(DATABASE_URL, echo=False, **_engine_kwargs(DATABASE_URL))

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/posts")
        def list_posts(db: Session = Depends(get_db)):
            return ForumPostRepository(db).find_all()

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            db.query(User).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    All-or-nothing unit of work on an existing session.

    Commits when the block exits normally; rolls back and re-raises on any
    exception, so a failed multi-step mutation leaves no partial writes.

    Usage:
        with transaction(db):
            db.add(report)
            post.report_count += 1
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
