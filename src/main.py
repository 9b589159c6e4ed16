"""PageGrade API - Web page grading service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import analyze_router, health_router, reports_router
from config import settings
from db.session import create_tables
from pipeline.exceptions import AnalysisFailedError, AnalysisValidationError, StoreError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Code before `yield` runs on startup.
    Code after `yield` runs on shutdown.
    """
    logger.info(f"Starting {settings.app_name} (algorithm {settings.algorithm_version})...")
    await create_tables()
    yield
    logger.info(f"Shutting down {settings.app_name}...")


app = FastAPI(
    title="PageGrade API",
    description="Grades web pages on speed, fonts, images, CTAs, whitespace and social proof.",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, prefix="/api/v1")
app.include_router(analyze_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")


# All errors leave the API as {"error": "..."}


@app.exception_handler(AnalysisValidationError)
async def validation_error_handler(request: Request, exc: AnalysisValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


@app.exception_handler(AnalysisFailedError)
async def analysis_failed_handler(request: Request, exc: AnalysisFailedError):
    # The record keeps the real message; callers only get a generic one
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.get("/", include_in_schema=False)
async def root():
    """Service pointers."""
    return {
        "service": "PageGrade API",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
