"""Health check endpoint.

Reports the API version and whether the store's database answers a query.
"""

import sqlite3
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from eduarch import __version__
from eduarch.store import DomainStore
from eduarch.web.dependencies import get_store
from eduarch.web.schemas import HealthResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(store: DomainStore = Depends(get_store)) -> HealthResponse:
    """Check API and database health."""
    try:
        with store.connection() as conn:
            conn.execute("SELECT 1").fetchone()
        database = "ok"
    except sqlite3.Error as e:
        logger.warning("health.database_unavailable", path=str(store.db_path), error=str(e))
        database = "unavailable"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        version=__version__,
        database=database,
        delete_policy=store.delete_policy,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
