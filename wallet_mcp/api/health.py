from typing import Any, Dict

from fastapi import APIRouter

from .. import __version__
from ..server import SERVER_NAME

router = APIRouter()

ENDPOINTS = {
    "mcp": "POST /mcp",
    "health": "GET /health",
}


@router.get("/health")
@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Liveness only: answers without touching the node or the price source."""
    return {
        "status": "healthy",
        "service": SERVER_NAME,
        "version": __version__,
        "endpoints": ENDPOINTS,
    }
