from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

# Import core components
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.middleware.logging import LoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.timeout import TimeoutMiddleware

# Import configuration
from app.config import init_firebase

# Import route modules
from app.routes import user, health, results, analysis, chat, appointments
from app.exceptions import (
    UnauthorizedException, ForbiddenException,
    NotFoundException, ValidationException, GenerationError, PersistTransient
)

# Set up logging first
logger = setup_logging()

_docs_enabled = settings.is_development or os.getenv("SHOW_DOCS", "").lower() in ("1", "true", "yes")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 50)
    logger.info("StressLess Assessment API starting up")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS origins: {settings.cors_origins} (regex: {settings.cors_origin_regex})")
    logger.info(f"Rate limiting: {'enabled' if settings.rate_limit_enabled else 'disabled'}")
    logger.info(f"Request timeout: {settings.request_timeout_seconds}s")

    from app.services.llm import get_llm_service
    llm_service = get_llm_service()
    llm_status = "configured" if llm_service.is_available() else "not configured (cached analyses only)"
    logger.info(f"LLM provider {llm_service.primary_provider.PROVIDER_NAME}: {llm_status}")
    logger.info("=" * 50)

    yield
    # Shutdown logic
    logger.info("StressLess Assessment API shutting down gracefully")

app = FastAPI(
    title="StressLess Assessment API",
    description="Stress self-assessment, scoring and personalized wellness analysis",
    version="1.0.0",
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    lifespan=lifespan,
)

# Add middleware in correct order (last added = first executed)
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(LoggingMiddleware)

if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware, calls_per_minute=settings.rate_limit_per_minute)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize Firebase (skip in test environment)
if os.getenv("ENV") != "test":
    init_firebase()

# Include routers
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(results.router)
app.include_router(analysis.router)
app.include_router(chat.router)
app.include_router(appointments.router)

# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Unauthorized access attempt on {request.url.path}")
    return JSONResponse(
        status_code=401,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )

@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Forbidden access attempt on {request.url.path}")
    return JSONResponse(
        status_code=403,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )

@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Validation error on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=400,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )

@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Not found error on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )

@app.exception_handler(GenerationError)
async def generation_exception_handler(request: Request, exc: GenerationError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(
        f"[{correlation_id}] Generation failed on {request.url.path} "
        f"(type={exc.error_type}, provider={exc.provider}): {exc.detail}"
    )
    content = {
        "detail": exc.detail,
        "error_type": exc.error_type,
        "retryable": exc.retryable,
        "correlation_id": correlation_id,
    }
    headers = {"Retry-After": "5"} if exc.retryable else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

@app.exception_handler(PersistTransient)
async def persist_exception_handler(request: Request, exc: PersistTransient):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Storage write failed on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=503,
        content={
            "detail": "Could not save right now, please try again",
            "retryable": True,
            "correlation_id": correlation_id,
        },
        headers={"Retry-After": "5"},
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc),
                "correlation_id": correlation_id,
                "type": type(exc).__name__
            }
        )
    else:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "correlation_id": correlation_id
            }
        )

# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "StressLess Assessment API",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs_url": "/docs" if _docs_enabled else None,
        "health_check": "/health",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_level="info" if settings.is_development else "warning"
    )
