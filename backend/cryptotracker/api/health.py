"""
Health check endpoints.
"""
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
@router.get("/api")
async def root():
    return {"ok": True, "msg": "CryptoTracker backend"}


@router.get("/api/health")
async def health(request: Request):
    """Liveness plus response cache statistics."""
    gateway = getattr(request.app.state, "market_gateway", None)
    return {
        "ok": True,
        "cache": gateway.cache.stats() if gateway is not None else None,
    }
