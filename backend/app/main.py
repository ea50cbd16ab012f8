"""
TaskFlow FastAPI Application
Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings
from app.database import init_db, close_db, ping_db
from app.errors import PayloadTooLarge, register_exception_handlers, error_response
from app.limiter import limiter

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and cleanup on shutdown.
    """
    # Startup
    from app.logging_config import setup_logging
    setup_logging(log_dir=settings.log_dir, log_level=settings.log_level)

    logger.info(f"Starting {settings.app_name} backend in {settings.environment} mode")

    # Initialize database (creates tables if they don't exist)
    # In production, use Alembic migrations instead
    if settings.debug or settings.environment != "production":
        await init_db()
        logger.info("Database initialized")

    logger.info(f"API mounted at {settings.api_prefix}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name} backend")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title="TaskFlow",
    description="""
    ## Personal Task Management API

    ### Features
    - **Accounts**: Register, log in, rotate refresh tokens, change password
    - **Tasks**: Create, edit, complete and delete private tasks
    - **Filtering**: By completion, priority and category with sorting and pagination
    - **Statistics**: Totals, pending, high priority and overdue counts
    """,
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Configure rate limiting
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

register_exception_handlers(app)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            size = int(content_length)
        except ValueError:
            return error_response(400, "Invalid Content-Length header")
        if size > settings.max_body_bytes:
            logger.warning(f"Rejected {size} byte body on {request.method} {request.url.path}")
            return error_response(PayloadTooLarge.status_code, PayloadTooLarge.default_message)
    return await call_next(request)


# Outermost middleware; every response passes through it
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
    if request.url.scheme == "https":
        response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
    return response


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/api/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Health check endpoint for container orchestration."""
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "environment": settings.environment,
    }


@app.get("/api/health/db", tags=["Health"])
@limiter.exempt
async def database_health():
    """Database connectivity check."""
    try:
        await ping_db()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return error_response(503, "Database unavailable")
    return {"success": True, "message": "Database connected"}


from app.api import auth, tasks


# =============================================
# API Routers
# =============================================

app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Auth"])
app.include_router(tasks.router, prefix=f"{settings.api_prefix}/tasks", tags=["Tasks"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=4000,
        reload=settings.debug
    )
