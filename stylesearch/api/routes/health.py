"""Liveness endpoint. Does not probe the agent service or Claude."""

from __future__ import annotations

from fastapi import APIRouter

from stylesearch import __version__
from stylesearch.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "environment": settings.environment,
        "conversation_backend": settings.conversation_backend,
    }
