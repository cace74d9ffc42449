"""
Main FastAPI application for ProjectPilot
"""
import os
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from projectpilot.config import settings
from projectpilot.core.exceptions import APIException
from projectpilot.api.v1.router import api_router
from projectpilot.core.database import close_db, init_db
from projectpilot.core.logging import get_logger, log_request, setup_logging
from projectpilot.core.rate_limiting import rate_limit_middleware
from projectpilot.ml.runtime import load_prediction_runtime

# Configure structured logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        logger.error("Server will continue but database operations may fail")

    app.state.prediction_runtime = load_prediction_runtime(settings)
    logger.info(f"AI prediction method: {app.state.prediction_runtime.method}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Project management API with task duration, suggestion and workflow predictions",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

logger.info(f"CORS allowed origins: {settings.allowed_origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

trusted_hosts = os.getenv("TRUSTED_HOSTS", "").split(",")
if trusted_hosts and trusted_hosts[0]:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)
else:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=["*"])

app.middleware("http")(rate_limit_middleware)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to responses"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    log_request(logger, request.method, request.url.path, response.status_code, process_time)
    return response


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details
            },
            "timestamp": time.time()
        }
    )


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions"""
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request bodies and query parameters that fail validation"""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return error_response(400, "VAL_001", "Validation failed", jsonable_encoder({"errors": errors}))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)

    error_details = None
    if settings.debug:
        error_details = {
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "traceback": traceback.format_exc(),
        }
    return error_response(500, "SYS_001", "Internal server error", error_details)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "success": True,
        "data": {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment
        },
        "timestamp": time.time()
    }


# Include API routes
app.include_router(api_router, prefix="/api")
