"""Maps the error taxonomy onto HTTP responses.

Every error body has the shape {error, provider, detail, retryable}.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from server.models.responses import ErrorResponse
from shared.errors.exceptions import (
    DimensionMismatchError,
    GenerationRefusedError,
    ProviderError,
    ValidationError,
)


def _error_response(status_code: int, exc: Exception, provider: str | None = None, retryable: bool = False) -> JSONResponse:
    body = ErrorResponse(error=type(exc).__name__, provider=provider, detail=str(exc), retryable=retryable)
    return JSONResponse(content=body.model_dump(), status_code=status_code)


def provider_status_code(exc: ProviderError) -> int:
    """422 for content-policy refusals, 504 for timeouts, 502 for every other backend failure."""
    if isinstance(exc, GenerationRefusedError):
        return 422
    if exc.timed_out:
        return 504
    return 502


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(400, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        body = ErrorResponse(error="ValidationError", detail=str(exc.errors()), retryable=False)
        return JSONResponse(content=body.model_dump(), status_code=400)

    @app.exception_handler(DimensionMismatchError)
    async def handle_dimension_mismatch(request: Request, exc: DimensionMismatchError) -> JSONResponse:
        request.app.state.logging.error("Dimension mismatch on %s: %s", request.url.path, exc)
        return _error_response(500, exc)

    @app.exception_handler(ProviderError)
    async def handle_provider_error(request: Request, exc: ProviderError) -> JSONResponse:
        request.app.state.logging.error("%s backend failed on %s: %s", exc.provider, request.url.path, exc)
        return _error_response(provider_status_code(exc), exc, provider=exc.provider, retryable=exc.retryable)
