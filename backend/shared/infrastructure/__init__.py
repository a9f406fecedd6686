"""
Infrastructure module: Database sessions and request correlation.

Provides:
- Database sessions and transactions (db.py)
- Correlation IDs for request tracing (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    transaction,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "transaction",
]
