"""
PrimeCare Warranty - Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from primecare.core.config import settings
from primecare.core.database import Base, engine
from primecare.core.logging_config import configure_logging
from primecare.api.v1.api import api_router
from primecare.services.scheduler import CronScheduler

# Import all models to ensure they're registered
from primecare import models  # noqa: F401

logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Warranty health tracking and service reminders for JKET machines",
    version=settings.VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.state.scheduler = CronScheduler()


@app.on_event("startup")
async def startup_event():
    """Create database tables and start the reminder scheduler"""
    configure_logging(settings.LOG_LEVEL)

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("[OK] Database tables checked/created successfully")
    except Exception:
        logger.error("Could not create tables automatically; run the migrations", exc_info=True)

    app.state.scheduler.ensure_initialized()
    if settings.SCHEDULER_ENABLED:
        app.state.scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    app.state.scheduler.shutdown()


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Trusted hosts
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS,
)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": settings.VERSION,
        "status": "operational"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
