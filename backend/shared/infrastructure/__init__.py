"""
Infrastructure module: Database sessions and request correlation.

Provides:
- Database sessions and transactions (db.py)
- Correlation ID middleware and logging filter (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    safe_commit,
)
from shared.infrastructure.correlation import (
    CorrelationIdMiddleware,
    CorrelationIdFilter,
)

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "get_db",
    "safe_commit",
    # correlation
    "CorrelationIdMiddleware",
    "CorrelationIdFilter",
]
