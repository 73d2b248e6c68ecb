"""
FastAPI application for the Complexity Broker.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from complexity_broker import __version__
from complexity_broker.config import Settings, get_settings, logger
from complexity_broker.models import AnalysisResult, AnalyzeRequest, ErrorResponse
from complexity_broker.orchestrator import ComplexityOrchestrator

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

METHOD_NOT_ALLOWED = "Only POST method is allowed"


def get_orchestrator(request: Request) -> ComplexityOrchestrator:
    return request.app.state.orchestrator


def validation_message(errors: list[dict]) -> str:
    """Map pydantic errors to a client message without echoing input values."""
    if not errors:
        return "Invalid request format"
    err = errors[0]
    err_type = err.get("type")
    loc = err.get("loc") or ()

    if err_type == "json_invalid":
        return "Request body must be valid JSON"
    if loc and loc[-1] == "code":
        if err_type == "missing":
            return "Field 'code' is required"
        if err_type == "string_type":
            return "Field 'code' must be a string"
        if err_type == "code_too_long":
            return f"Field 'code' exceeds {(err.get('ctx') or {}).get('max_length')} characters"
        return "Field 'code' must be a non-empty string"
    if err_type == "missing":
        return "Request body is required"
    return "Invalid request format"


# ---------------------------------------------------------------------------
# Middleware and exception handlers
# ---------------------------------------------------------------------------


async def cors_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject bad payloads with 400, logging only error types and field names."""
    errors = list(exc.errors())
    error_details = [{"field": err.get("loc", [])[-1] if err.get("loc") else "unknown", "type": err.get("type")} for err in errors[:5]]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, error_details)
    body = ErrorResponse(error=validation_message(errors))
    return JSONResponse(status_code=400, content=body.model_dump())


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": METHOD_NOT_ALLOWED}, headers=exc.headers)
    return await http_exception_handler(request, exc)


async def global_exception_handler(request: Request, exc: Exception):
    """Last resort; request bodies are never logged."""
    logger.error(
        "Unhandled exception on %s %s: %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc)[:200],
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
        headers=CORS_HEADERS,
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------


analysis_router = APIRouter()


@analysis_router.post(
    "/analyze",
    response_model=AnalysisResult,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def analyze_code(
    request: AnalyzeRequest,
    orchestrator: ComplexityOrchestrator = Depends(get_orchestrator),
):
    """
    Estimate time and space complexity of a code snippet.

    Always answers 200 for a valid payload; `source` tells which stage
    produced the result and `success` is false for the heuristic fallback.
    """
    request_id = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    start_time = time.time()

    logger.info("[%s] REQUEST RECEIVED - Code length: %d chars", request_id, len(request.code))

    result = await orchestrator.resolve(request.code)

    elapsed_time = time.time() - start_time
    logger.info(
        "[%s] REQUEST COMPLETED - Time taken: %.3fs - Source: %s%s",
        request_id,
        elapsed_time,
        result.source,
        f" ({result.reason})" if result.reason else "",
    )
    return result


@analysis_router.options("/analyze", include_in_schema=False)
async def analyze_preflight():
    return Response(status_code=200)


health_router = APIRouter()


@health_router.get("/health")
async def health(orchestrator: ComplexityOrchestrator = Depends(get_orchestrator)):
    """Report which remote backends are configured."""
    backends = {
        source: {
            "provider": backend.provider_name,
            "model": backend.model_name,
            "configured": backend.configured,
        }
        for source, backend in orchestrator.stages
    }
    any_configured = any(b["configured"] for b in backends.values())
    return {
        "status": "ok" if any_configured else "degraded",
        "version": __version__,
        "backends": backends,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# FastAPI app assembly
# ---------------------------------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[ComplexityOrchestrator] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to the process-wide settings
        orchestrator: Defaults to one built from settings
    """
    settings = settings or get_settings()
    orchestrator = orchestrator or ComplexityOrchestrator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Complexity Broker v%s starting", __version__)
        for source, backend in orchestrator.stages:
            logger.info(
                "%s backend: %s (model=%s) %s",
                source,
                backend.provider_name,
                backend.model_name,
                "ready" if backend.configured else "not configured",
            )
        if not any(backend.configured for _, backend in orchestrator.stages):
            logger.warning("No remote backend configured - every request will use the heuristic fallback")

        yield

        logger.info("Shutting down")
        await orchestrator.aclose()

    app = FastAPI(
        title="Complexity Broker API",
        description="Big-O estimates for code snippets with LLM fallback",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.state.orchestrator = orchestrator

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    app.middleware("http")(cors_headers_middleware)

    @app.get("/")
    async def root():
        return {
            "name": "Complexity Broker API",
            "version": __version__,
            "status": "ok",
        }

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(analysis_router, prefix="/api", tags=["analysis"])
    app.include_router(health_router, tags=["health-compat"])
    app.include_router(analysis_router, tags=["analysis-compat"])

    return app


app = create_app()
