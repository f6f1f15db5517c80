"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, Body
from fastapi.responses import PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import EmailStr
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .core import get_settings
from .deps import EmailDep
from .infrastructure.database import engine
from .logging_config import configure_logging
from .models import Base
from .api.v1.api import api_router
from .api.v1.middleware import register_exception_handlers

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("SELECT 1"))
        logger.info("Database ready")
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database connection issue: %s", exc)

    logger.info("Environment: %s, frontend: %s", settings.ENVIRONMENT, settings.FRONTEND_URL)

    yield

    # Shutdown
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Immersive Trips Booking API",
    description="Tour catalogue, bookings and payments for immersivetrips.in",
    version="1.0.0",
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Rate limiting
@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too many requests from this IP, please try again later.", status_code=429)

app.add_middleware(SlowAPIMiddleware)

# Exception handling
register_exception_handlers(app)

# API routes
app.include_router(api_router, prefix="/api")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "OK",
        "message": "Immersive Trips Booking API is running",
        "timestamp": _now(),
    }


@app.get("/api/test")
async def test():
    return {"message": "Server is working!", "timestamp": _now()}


@app.post("/api/test-email")
async def test_email(email_service: EmailDep, email: Optional[EmailStr] = Body(None, embed=True)):
    """Send a test message to check SMTP settings."""
    result = await email_service.send_test_email(email)
    return {"success": True, "message": "Test email sent successfully", "recipients": result["recipients"]}
