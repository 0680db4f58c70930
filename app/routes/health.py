"""
Health check and monitoring endpoints.
"""
import time
import logging
from fastapi import APIRouter
from app.db import check_database_health
from app.services.llm import get_llm_service
from app.core.settings import settings

logger = logging.getLogger("app.health")
router = APIRouter()

@router.get("")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "version": "1.0.0"
    }

@router.get("/detailed")
async def detailed_health_check():
    """Detailed health check with service status."""
    start_time = time.time()

    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.environment,
        "services": {}
    }

    # Check database
    db_health = await check_database_health()
    health_status["services"]["database"] = db_health
    if db_health["status"] != "healthy":
        health_status["status"] = "degraded"

    # Check LLM providers (credentials only, no generation)
    try:
        llm_service = get_llm_service()
        primary = llm_service.primary_provider
        fallback = llm_service.fallback_provider
        available = llm_service.is_available()
        health_status["services"]["llm"] = {
            "status": "configured" if available else "not_configured",
            "primary_provider": primary.PROVIDER_NAME,
            "primary_model": primary.model,
            "fallback_provider": fallback.PROVIDER_NAME if fallback else None,
            "fallback_enabled": llm_service.fallback_enabled,
            "providers": llm_service.get_available_providers(),
        }
        if not available:
            # Cached analyses are still served; new ones will fail
            health_status["status"] = "degraded"
    except Exception as e:
        logger.error(f"LLM health check failed: {e}")
        health_status["services"]["llm"] = {
            "status": "error",
            "error": str(e)
        }
        health_status["status"] = "degraded"

    response_time = (time.time() - start_time) * 1000
    health_status["response_time_ms"] = round(response_time, 2)

    return health_status

@router.get("/ready")
async def readiness_check():
    """Kubernetes-style readiness probe."""
    db_health = await check_database_health()
    if db_health["status"] != "healthy":
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}

@router.get("/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"status": "alive", "timestamp": time.time()}
