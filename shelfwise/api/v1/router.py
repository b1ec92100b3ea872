"""
Main API router
"""
from fastapi import APIRouter

from ...core.responses import ErrorResponse
from .endpoints import analytics, auth, reading, shelves, tracker, user

# Domain errors are rendered by the app-level exception handler
api_router = APIRouter(responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
})

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(reading.router, prefix="/read", tags=["reading"])
api_router.include_router(shelves.router, prefix="/shelves", tags=["shelves"])
api_router.include_router(tracker.router, prefix="/tracker", tags=["tracker"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
