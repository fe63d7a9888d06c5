"""Health Probe — liveness endpoint for container orchestration."""

from fastapi import APIRouter, Request, status

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Basic liveness probe. Also reports the registered dispatcher methods."""
    return {
        "status": "healthy",
        "service": "hash-commands-api",
        "version": "1.0.0",
        "methods": sorted(request.app.state.dispatch.methods),
    }
