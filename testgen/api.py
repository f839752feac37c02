"""FastAPI application exposing test generation over HTTP."""

import time
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from testgen.generator import TestGenerationService, create_service
from testgen.models import ApiResponse, TestGenerationRequest

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api")


def _envelope(status_code: int, **fields) -> JSONResponse:
    """Wrap fields in the success/data/message envelope.

    Args:
        status_code: HTTP status for the response.
        **fields: ApiResponse fields.

    Returns:
        JSON response with camelCase data.
    """
    body = ApiResponse(**fields).model_dump(mode="json", by_alias=True)
    return JSONResponse(status_code=status_code, content=body)


def format_validation_errors(exc: RequestValidationError) -> str:
    """Join validation errors into one human-readable message.

    Args:
        exc: Validation error raised while parsing the request body.

    Returns:
        Messages such as ``code: String should have at least 1 character``
        joined by ``, ``.
    """
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return ", ".join(messages)


def _service(request: Request) -> TestGenerationService:
    return request.app.state.service


@router.post("/generate-tests")
async def generate_tests(body: TestGenerationRequest, request: Request) -> JSONResponse:
    try:
        result = await _service(request).generate_tests(body)
    except Exception as exc:
        logger.exception("generate_tests_route_failed", error=str(exc))
        return _envelope(
            500, success=False, error="Generation failed", message=str(exc)
        )
    return _envelope(
        200,
        success=True,
        data=result.model_dump(mode="json", by_alias=True),
        message="Tests generated successfully",
    )


@router.get("/models")
async def list_models(request: Request) -> JSONResponse:
    try:
        models = await _service(request).list_models()
    except Exception as exc:
        logger.exception("list_models_route_failed", error=str(exc))
        return _envelope(
            500, success=False, error="Failed to retrieve models", message=str(exc)
        )
    return _envelope(
        200,
        success=True,
        data=[model.model_dump() for model in models],
        message="Models retrieved successfully",
    )


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    ollama_healthy = await _service(request).check_health()
    data = {
        "server": "healthy",
        "ollama": "healthy" if ollama_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }
    return _envelope(
        200 if ollama_healthy else 503,
        success=True,
        data=data,
        message="Health check completed",
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = format_validation_errors(exc)
    logger.info("request_validation_failed", path=request.url.path, message=message)
    return _envelope(400, success=False, error="Validation failed", message=message)


def create_app(service: TestGenerationService | None = None) -> FastAPI:
    """Create the HTTP application.

    Args:
        service: Generation service; built from the environment if None.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(title="testgen", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service or create_service()
    app.state.started_at = time.monotonic()
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app
