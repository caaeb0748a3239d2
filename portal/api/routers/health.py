"""Health check endpoints.

- /health: Basic health check
- /health/ready: Readiness probe (database reachable)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from portal.core.config import VERSION
from portal.api.deps import get_db

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return {"status": "healthy"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


@router.get("/health")
async def health_check():
    """Returns 200 while the application is running."""
    return {"status": "healthy", "version": VERSION, "timestamp": _now()}


@router.get("/health/ready")
async def readiness_probe(db: Session = Depends(get_db)):
    """Returns 503 when the database cannot be reached."""
    database = check_database(db)
    if database["status"] != "healthy":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": database}, "timestamp": _now()},
        )
    return {"status": "ready", "checks": {"database": database}, "timestamp": _now()}
