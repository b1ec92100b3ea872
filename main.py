"""
Shelfwise Backend API
FastAPI application with Firebase integration
"""
import os
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uvicorn

from shelfwise.core.config import settings
from shelfwise.core.exceptions import AuthenticationException, FirestoreException, ShelfwiseException
from shelfwise.core.firebase_config import initialize_firebase
from shelfwise.core.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from shelfwise.core.responses import error_response
from shelfwise.api.v1.router import api_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("🚀 Starting Shelfwise Backend...")
    logger.debug(f"Debug mode: {settings.DEBUG}")
    logger.debug(f"Reporting timezone: {settings.TIMEZONE}")

    initialize_firebase()

    yield

    logger.info("🛑 Shutting down Shelfwise Backend...")


# Create FastAPI app
app = FastAPI(
    title="Shelfwise API",
    description="Reading tracker backend: sessions, shelves, goals and analytics",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


@app.exception_handler(ShelfwiseException)
async def shelfwise_exception_handler(request: Request, exc: ShelfwiseException):
    if isinstance(exc, FirestoreException):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationException) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.details),
        headers=headers
    )


# Security middleware (order matters - these run first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware, calls=settings.RATE_LIMIT_CALLS, period=settings.RATE_LIMIT_PERIOD)

# CORS middleware - environment-based configuration
allowed_origins = list(settings.CORS_ORIGINS)

# In production, don't use wildcard
if settings.DEBUG:
    logger.warning("⚠️  CORS wildcard enabled - DEBUG mode. Disable in production!")
    allowed_origins.append("*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_router, prefix="/api/v1")


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "Shelfwise Backend is running"}


if __name__ == "__main__":
    # Read PORT from environment (Cloud Run sets this)
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=port,
        reload=settings.DEBUG,
        log_level="info",
        access_log=True,
        log_config=None  # Use our custom logging config
    )
