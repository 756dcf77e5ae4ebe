"""
SEO Agent Governance FastAPI Application Entry Point.

This module initializes the FastAPI application with:
- CORS middleware
- OpenTelemetry instrumentation
- Request ID injection and request logging
- Lifespan context management (DB, Redis connections)
- Router mounting
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.core_api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from apps.core_api.routers import approvals, health, leases, metrics, policies
from seo_config.settings import Settings
from seo_obs.logging import get_logger, setup_logging
from seo_obs.tracing import setup_tracing

# Initialize settings
settings = Settings()

# Setup logging
setup_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles:
    - Redis connection initialization
    - Database connection pool teardown
    """
    from apps.core_api.deps import close_redis, init_redis
    from seo_store.database import close_db_connections

    logger.info(
        "api_startup",
        environment=settings.ENVIRONMENT,
        database=settings.DATABASE_URL.split("@")[-1] if "@" in settings.DATABASE_URL else "local",
        redis=settings.REDIS_URL,
    )

    await init_redis()

    yield

    logger.info("api_shutdown")
    await close_redis()
    await close_db_connections()


# Initialize FastAPI application
app = FastAPI(
    title="SEO Agent Governance API",
    description="Policy, risk and approval decisions for autonomous SEO agent actions",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Setup OpenTelemetry tracing
setup_tracing(settings, app)

# ============================================================================
# MIDDLEWARE
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.API_CORS_ORIGINS.split(",") if settings.API_CORS_ORIGINS else ["*"],
    allow_credentials=settings.API_CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Last added runs first: request ID must be set before logging reads it.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled exceptions.

    Internal details are logged, never returned.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        request_id=getattr(request.state, "request_id", None),
        error=str(exc),
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please contact support.",
        },
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(policies.router, prefix="/policies", tags=["policies"])
app.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
app.include_router(leases.router, prefix="/leases", tags=["leases"])

# Health and metrics
app.include_router(health.router, prefix="", tags=["health"])
app.include_router(metrics.router, prefix="", tags=["metrics"])


# ============================================================================
# ROOT ENDPOINT
# ============================================================================


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": "SEO Agent Governance API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/healthz",
        "metrics": "/metrics",
        "endpoints": {
            "policy_info": "GET /policies",
            "validate": "POST /policies/validate",
            "runtime_check": "POST /policies/runtime-check",
            "approval": "GET /approvals/{id}",
            "approval_decision": "POST /approvals/{id}/decision",
            "lease": "POST /leases/{action_id}",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.core_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="info",
    )
