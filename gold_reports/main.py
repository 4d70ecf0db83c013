"""
FastAPI Application

Main entry point for the Gold Layer Reports API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from gold_reports.config import get_settings
from gold_reports.config.logging import configure_logging
from gold_reports.database.connection import init_database, close_database
from gold_reports.serving.api.middleware import RequestLoggingMiddleware
from gold_reports.serving.api.routes import health_router, reports_router

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Gold Layer Reports API")

    try:
        await init_database()
    except Exception as e:
        logger.warning(f"Database init failed: {e}")

    yield

    logger.info("Shutting down...")
    await close_database()


app = FastAPI(
    title="Gold Layer Reports API",
    description="Product and customer reports computed over the Gold layer star schema",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Gold Layer Reports API",
        "version": settings.version,
        "environment": settings.app_env,
        "reports": ["report_products", "report_customers"],
        "documentation": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
