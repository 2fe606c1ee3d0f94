"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from examsim.api.v1.endpoints import attempts, health, history, sessions

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(attempts.router, prefix="/attempts", tags=["Attempts"])
api_router.include_router(history.router, prefix="/history", tags=["History"])
