import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi import Request as FastAPIRequest
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from math_solver.clients.llm import LLMClient, build_llm_client, get_llm_client
from math_solver.config import Config, allowed_origins, cors_allows_all
from math_solver.errors import SolverError, UpstreamUnavailable
from math_solver.logging_utils import StructuredLogger, generate_request_id
from math_solver.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    service_health_status,
    solver_errors_total,
)
from math_solver.models.schemas import SolveRequest, SolveResponse
from math_solver.orchestrators import build_solve_response, solve_problem
from math_solver.routes.admin import router as admin_router
from math_solver.routes.catalog import KNOWN_ENDPOINTS
from math_solver.routes.catalog import router as catalog_router
from math_solver.services.input_processor.service import validate_problem

logger = StructuredLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the LLM client on startup unless one was injected already."""
    logger.info("Starting app...")

    if getattr(app.state, "llm_client", None) is None:
        app.state.llm_client = build_llm_client()

    if app.state.llm_client is None:
        logger.error(
            "GEMINI_API_KEY environment variable is not set, /solve will fail",
        )
        service_health_status.labels(service="app").set(1)
    else:
        logger.info(
            "LLM client initialized",
            context={
                "model": Config.GEMINI.MODEL_NAME,
                "base_url": Config.GEMINI.BASE_URL,
            },
        )
        service_health_status.labels(service="app").set(2)

    logger.info(
        "App ready",
        context={
            "host": Config.SERVER.HOST,
            "port": Config.SERVER.PORT,
            "environment": Config.APP.ENVIRONMENT,
            "cors_allow_all": cors_allows_all(),
        },
    )

    yield

    logger.info("Shutting down...")
    service_health_status.labels(service="app").set(0)
    logger.info("App stopped")


app = FastAPI(title=Config.APP.NAME, version=Config.APP.VERSION, lifespan=lifespan)

app.include_router(catalog_router)
app.include_router(admin_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if cors_allows_all() else allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Origin",
        "X-Requested-With",
        "Content-Type",
        "Accept",
        "Authorization",
    ],
    expose_headers=["X-Request-ID"],
)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _internal_error_response(
    exc: Exception, request_id: Optional[str]
) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc),
            "timestamp": _utc_timestamp(),
        },
        headers={"X-Request-ID": request_id} if request_id else None,
    )


@app.middleware("http")
async def logging_and_metrics_middleware(request: FastAPIRequest, call_next):
    """Log requests and record HTTP metrics."""
    request_id = generate_request_id()
    start_time = time.time()

    is_metrics_endpoint = request.url.path == "/metrics"

    if not is_metrics_endpoint:
        logger.info(
            "Incoming request",
            context={
                "endpoint": request.url.path,
                "method": request.method,
                "origin": request.headers.get("origin", "none"),
                "client": request.client.host if request.client else "unknown",
            },
            request_id=request_id,
        )

    request.state.request_id = request_id

    try:
        response = await call_next(request)
    except Exception as e:
        duration = time.time() - start_time
        http_requests_total.labels(
            service="app",
            endpoint=request.url.path,
            method=request.method,
            status=500,
        ).inc()
        http_request_duration_seconds.labels(
            service="app", endpoint=request.url.path, method=request.method
        ).observe(duration)
        solver_errors_total.labels(error_type=type(e).__name__).inc()
        logger.error(
            "Request failed",
            context={
                "endpoint": request.url.path,
                "method": request.method,
                "error": str(e),
                "duration_seconds": round(duration, 3),
            },
            request_id=request_id,
        )
        return _internal_error_response(e, request_id)

    duration = time.time() - start_time

    if not is_metrics_endpoint:
        http_requests_total.labels(
            service="app",
            endpoint=request.url.path,
            method=request.method,
            status=response.status_code,
        ).inc()
        http_request_duration_seconds.labels(
            service="app", endpoint=request.url.path, method=request.method
        ).observe(duration)
        logger.info(
            "Request completed",
            context={
                "endpoint": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_seconds": round(duration, 3),
            },
            request_id=request_id,
        )

    response.headers["X-Request-ID"] = request_id
    return response


# === Error handlers ===


@app.exception_handler(SolverError)
async def solver_error_handler(request: FastAPIRequest, exc: SolverError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: FastAPIRequest, exc: RequestValidationError
):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request body",
            "details": str(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: FastAPIRequest, exc: StarletteHTTPException):
    # Unknown paths and known paths with an unsupported method get the same 404.
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "Endpoint not found",
                "availableEndpoints": KNOWN_ENDPOINTS,
                "requestedPath": request.url.path,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: FastAPIRequest, exc: Exception):
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "Unhandled error",
        context={"error": str(exc), "error_type": type(exc).__name__},
        request_id=request_id,
    )
    return _internal_error_response(exc, request_id)


# === Solve ===


@app.post(
    "/solve",
    response_model=SolveResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def solve(
    fastapi_request: FastAPIRequest,
    request: Optional[SolveRequest] = None,
    llm_client: Optional[LLMClient] = Depends(get_llm_client),
):
    """Solve a natural-language math problem with the configured model."""
    started_at = time.time()
    request_id = getattr(fastapi_request.state, "request_id", generate_request_id())

    problem = validate_problem(request.problem if request else None, request_id)

    if llm_client is None:
        logger.error("LLM client not initialized", request_id=request_id)
        raise UpstreamUnavailable()

    outcome = await solve_problem(problem, llm_client, request_id)
    response = build_solve_response(outcome, started_at)

    logger.info(
        "Successfully solved problem",
        context={
            "method": response.calculation.method,
            "degraded": response.degraded,
            "processing_ms": response.processing_time,
        },
        request_id=request_id,
    )
    return response
