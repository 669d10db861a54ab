"""Health endpoints for liveness/readiness checks."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.db.client import get_database, ping

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", summary="Liveness probe")
async def liveness_probe() -> dict:
    """Returns a trivial response so container orchestrators know the app is up."""
    return {"status": "alive"}


@router.get("/ready", summary="Readiness probe")
async def readiness_probe(db=Depends(get_database)):
    """Pings MongoDB; 503 until the database answers."""
    if await ping(db):
        return {"status": "ok", "mongo": "ok"}
    return JSONResponse(status_code=503, content={"status": "unavailable", "mongo": "unreachable"})
