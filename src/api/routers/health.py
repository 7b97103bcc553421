"""
Health check endpoints for monitoring and diagnostics.
"""

import time
from fastapi import APIRouter, Depends
from datetime import datetime

from ..models.common import HealthStatus
from ..dependencies.session import get_session_manager, get_model_manager, SessionManager
from src.models.manager import ModelManager

router = APIRouter()

API_VERSION = "1.0.0"

# Track server start time for uptime calculation
_server_start_time = time.time()


@router.get("/", response_model=HealthStatus)
async def health_check(
    session_manager: SessionManager = Depends(get_session_manager),
    model_manager: ModelManager = Depends(get_model_manager)
):
    """
    Basic health check endpoint.

    Reports the status of the API and its dependencies without spending
    any quota on the external services.
    """
    uptime = time.time() - _server_start_time
    dependencies = {}

    try:
        session_stats = session_manager.get_stats()
        dependencies["session_manager"] = f"✅ Active ({session_stats['active_sessions']} sessions)"
    except Exception as e:
        dependencies["session_manager"] = f"❌ Error: {str(e)}"

    try:
        ocr_ready = await model_manager.ocr.health_check()
        dependencies["ocr_service"] = "✅ Configured" if ocr_ready else "⚠️ Missing credentials"
    except Exception as e:
        dependencies["ocr_service"] = f"❌ Error: {str(e)}"

    try:
        task = model_manager.task_config("solve")
        dependencies["solver"] = f"✅ {task.provider}/{task.model}"
    except Exception as e:
        dependencies["solver"] = f"❌ Error: {str(e)}"

    return HealthStatus(
        status="healthy",
        version=API_VERSION,
        uptime=uptime,
        dependencies=dependencies
    )


@router.get("/detailed")
async def detailed_health_check(
    session_manager: SessionManager = Depends(get_session_manager),
    model_manager: ModelManager = Depends(get_model_manager)
):
    """Session counts and per-task call statistics."""
    uptime = time.time() - _server_start_time
    session_stats = session_manager.get_stats()

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "uptime_seconds": uptime,
        "uptime_human": f"{uptime//3600:.0f}h {(uptime%3600)//60:.0f}m {uptime%60:.0f}s",
        "sessions": {
            "active_count": session_stats["active_sessions"],
            "timeout_minutes": session_stats["timeout_minutes"],
            "oldest_session_age_seconds": session_stats["oldest_session_age"]
        },
        "tasks": model_manager.get_stats(),
    }


@router.get("/ready")
async def readiness_check(model_manager: ModelManager = Depends(get_model_manager)):
    """
    Readiness probe. Ready only when the OCR credentials are present and the
    solve task is configured.
    """
    try:
        if not await model_manager.ocr.health_check():
            return {"ready": False, "reason": "OCR service credentials missing"}
        model_manager.task_config("solve")
    except Exception as e:
        return {"ready": False, "reason": str(e)}

    return {"ready": True, "message": "Service ready to handle requests"}
