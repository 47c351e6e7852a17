"""
Error taxonomy shared by the services and the JSON error handlers.

Services raise these; `register_exception_handlers` turns them into
`{"error": <code>, "message": <text>}` bodies.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

CRISIS_RESOURCES: List[str] = [
    "いのちの電話: 0570-783-556",
    "こころの健康相談統一ダイヤル: 0570-064-556",
]


class FailSeedError(Exception):
    status_code: int = 500
    error: str = "server_error"
    message: str = "Something went wrong. Please try again later."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"error": self.error, "message": self.message}


class SafetyConcern(FailSeedError):
    status_code = 400
    error = "safety_concern"
    message = "Your message mentions something we are worried about. Please reach out to a support line."

    def __init__(self, message: Optional[str] = None, resources: Optional[List[str]] = None):
        super().__init__(message)
        self.resources = list(resources) if resources is not None else list(CRISIS_RESOURCES)

    def to_body(self) -> dict:
        body = super().to_body()
        body["resources"] = self.resources
        return body


class NotFound(FailSeedError):
    status_code = 404
    error = "not_found"
    message = "Entry not found."


class AlreadyCompleted(FailSeedError):
    status_code = 409
    error = "already_completed"
    message = "This conversation has already been finalized."


class NotCompleted(FailSeedError):
    status_code = 409
    error = "not_completed"
    message = "This conversation has not been finalized yet."


class ConcurrentUpdate(FailSeedError):
    status_code = 409
    error = "conflict"
    message = "The conversation was updated by another request. Please reload and try again."


class InputTooLarge(FailSeedError):
    status_code = 413
    error = "input_too_large"
    message = "The message is too long."


class ValidationError(FailSeedError):
    status_code = 422
    error = "validation_error"
    message = "The request is malformed."


class GenerationFailed(FailSeedError):
    status_code = 500
    error = "server_error"
    message = "Failed to generate a response. Please wait a moment and try again."


class Unauthorized(FailSeedError):
    status_code = 401
    error = "unauthorized"
    message = "Authentication required."


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or ValidationError.message


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers for the taxonomy above to the app."""

    @app.exception_handler(FailSeedError)
    async def failseed_error_handler(request: Request, exc: FailSeedError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=ValidationError.status_code,
            content={"error": ValidationError.error, "message": _format_validation_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = {401: "unauthorized", 403: "unauthorized", 404: "not_found"}.get(exc.status_code, "server_error")
        if exc.status_code < 500 and code == "server_error":
            code = "bad_request"
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": code, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content=FailSeedError().to_body())
