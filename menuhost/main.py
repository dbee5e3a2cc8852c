"""
MenuHost - Main Application Entry Point
Tenant provisioning and subscriptions for the multi-tenant menu platform
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from menuhost.core.config import get_settings
from menuhost.core.tenant_middleware import TenantSubdomainMiddleware
from menuhost.api import plans, subscriptions, tenants

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Initializing MenuHost backend", environment=settings.ENVIRONMENT)
    if settings.USE_TEST_SUBSCRIPTION_DURATION:
        logger.warning("Accelerated subscription periods enabled")
    # Tables are created by Alembic migrations, not auto-generated

    yield

    logger.info("Shutting down MenuHost backend")


# Create FastAPI application
app = FastAPI(
    title="MenuHost API",
    description="Tenant provisioning and subscription lifecycle for the menu platform",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TenantSubdomainMiddleware)

# Include routers
app.include_router(tenants.router, prefix=f"{settings.API_V1_PREFIX}/tenants", tags=["tenants"])
app.include_router(subscriptions.router, prefix=f"{settings.API_V1_PREFIX}/subscriptions", tags=["subscriptions"])
app.include_router(plans.router, prefix=f"{settings.API_V1_PREFIX}/plans", tags=["plans"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "menuhost-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "MenuHost API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "menuhost.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
