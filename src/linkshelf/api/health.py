"""Health check endpoint.

Verifies the server is running and the database answers.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf import __version__
from linkshelf.db.engine import get_db
from linkshelf.schemas.envelope import ApiResponse

router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict])
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    checks["sessions"] = len(request.app.state.sessions)
    status = "healthy" if checks["database"] == "ok" else "degraded"
    return ApiResponse.success({"status": status, **checks})
