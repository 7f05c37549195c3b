"""
Order Service - Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from sqlalchemy import text
import logging

from campus_orders import __version__
from campus_orders.api import notification_routes, routes
from campus_orders.config import settings
from campus_orders.db import database
from campus_orders.observability import instrument, setup_logging, setup_tracing
from campus_orders.services.errors import OrderServiceError

setup_logging(
    service_name=settings.service_name,
    log_level=settings.log_level,
    log_format=settings.log_format
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info(f"Starting {settings.service_name}")
    logger.info(f"Environment: {settings.environment}")

    try:
        engine = database.init_database(settings.database_url)
        database.create_tables()
        logger.info("Database initialized successfully")

        if settings.otel_enabled:
            instrument(engine=engine)

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    setup_tracing(
        service_name=settings.otel_service_name or settings.service_name,
        otlp_endpoint=settings.otel_endpoint,
        enabled=settings.otel_enabled
    )

    logger.info(f"{settings.service_name} started successfully")

    yield

    logger.info(f"Shutting down {settings.service_name}")
    if database.engine is not None:
        database.engine.dispose()


app = FastAPI(
    title="Campus Order Service",
    description="Order placement and order lifecycle for the campus food-ordering backend",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.otel_enabled:
    instrument(app=app)

app.include_router(routes.router)
app.include_router(notification_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint (liveness probe)"""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/ready")
def readiness_check():
    """Readiness check endpoint (readiness probe)"""
    try:
        db = database.SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()

        return {
            "status": "ready",
            "service": settings.service_name,
            "database": "connected",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.service_name,
                "database": "disconnected",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready"
    }


@app.exception_handler(OrderServiceError)
async def order_service_exception_handler(request: Request, exc: OrderServiceError):
    """Render domain errors as {detail, code}"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request shape errors"""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Invalid request data",
            "code": "VALIDATION_ERROR",
            "details": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "code": "INTERNAL_ERROR"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campus_orders.main:app",
        host="0.0.0.0",
        port=8002,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
