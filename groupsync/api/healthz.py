"""
Liveness endpoint.
"""

from fastapi import APIRouter

healthz_app = APIRouter(tags=["Health"])


@healthz_app.get("/healthz", summary="Liveness check", include_in_schema=False)
async def healthz() -> dict:
    return {"status": "ok"}
