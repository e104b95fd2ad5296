"""
Kanuni - Procurement Risk Intelligence
======================================
Main FastAPI application entry point.

This application provides:
- PPDA Act 2015 rule-based compliance checks
- Statistical price and vendor forensics
- Severity-weighted risk scoring

Document parsing, model inference and persistence live in other
services; this API receives already-extracted text.

Author: Kanuni Team
Version: 1.0.0
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import analyze_router, rules_router
from core import PPDA_SECTIONS
from core.config import get_settings
from schemas import HealthCheckResponse

# === Configuration ===
settings = get_settings()


# === Logging Setup ===
def setup_logging():
    """Configure structured logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure root logger
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


setup_logging()
logger = structlog.get_logger(__name__)


# === Lifespan Management ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    Startup:
    - Log the active rule registry and scoring policy
    """
    logger.info("Starting Kanuni API", version="1.0.0")
    logger.info(
        "Rule registry loaded",
        rule_count=len(PPDA_SECTIONS),
        weights=settings.severity_weights,
        tiers={
            "critical": settings.critical_threshold,
            "high": settings.high_threshold,
            "medium": settings.medium_threshold
        }
    )

    yield

    logger.info("Shutting down Kanuni API")


# === Application Setup ===
app = FastAPI(
    title="Kanuni API",
    description="""
    ## Procurement Risk Intelligence

    Kanuni evaluates procurement, contract and audit documents against
    the Public Procurement and Asset Disposal Act, 2015:

    - **Checks** documents against PPDA provisions
    - **Detects** price anomalies, vendor concentration and short tender periods
    - **Scores** findings into a 0-100 risk score and tier

    ### API Flow

    1. `POST /analyze` - Analyze extracted document text
    2. `GET /rules` - Inspect the rule registry
    """,
    version="1.0.0",
    license_info={
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT"
    },
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Exception Handlers ===
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception", path=request.url.path, error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred. Please try again.",
            "details": {"path": request.url.path} if settings.debug else None
        }
    )


# === Health Check ===
@app.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health check",
    description="Check if the API is running."
)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(
        status="healthy",
        version="1.0.0",
        timestamp=datetime.utcnow(),
        services={
            "api": "healthy",
            "rule_engine": "healthy" if PPDA_SECTIONS else "empty"
        }
    )


@app.get(
    "/",
    tags=["Health"],
    summary="Root endpoint",
    description="Welcome message and API information."
)
async def root():
    """Root endpoint with welcome message."""
    return {
        "name": "Kanuni API",
        "version": "1.0.0",
        "description": "Procurement Risk Intelligence",
        "docs": "/docs",
        "health": "/health"
    }


# === Register Routers ===
app.include_router(analyze_router)
app.include_router(rules_router)


# === Main Entry Point ===
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
