import platform
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from math_solver.clients.llm import LLMClient, get_llm_client
from math_solver.config import Config, allowed_origins, cors_allows_all
from math_solver.logging_utils import get_logs_by_request_id
from math_solver.orchestrators.solver.service import STRUCTURED_METHOD

router = APIRouter()

_started_at = time.time()


def get_uptime() -> float:
    return time.time() - _started_at


@router.get("/health")
async def health(llm_client: Optional[LLMClient] = Depends(get_llm_client)):
    """Health check with configuration diagnostics."""
    return {
        "status": "healthy" if llm_client else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "uptime": round(get_uptime(), 1),
        "services": {
            "llm": "configured" if llm_client else "missing_api_key",
            "model": Config.GEMINI.MODEL_NAME,
            "baseUrl": Config.GEMINI.BASE_URL,
            "cors": "enabled",
            "method": STRUCTURED_METHOD,
        },
        "configuration": {
            "host": Config.SERVER.HOST,
            "port": Config.SERVER.PORT,
            "environment": Config.APP.ENVIRONMENT,
            "corsAllowAll": cors_allows_all(),
            "allowedOrigins": allowed_origins(),
            "frontendUrl": Config.CORS.FRONTEND_URL or "not_set",
        },
        "server": {
            "pythonVersion": platform.python_version(),
            "platform": platform.system().lower(),
        },
    }


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/logs/{request_id}")
async def get_logs(request_id: str):
    """Get logs filtered by request ID"""
    logs = get_logs_by_request_id(request_id)
    return {"request_id": request_id, "logs": logs, "log_count": len(logs)}
