"""HTTP middleware: auth, error envelopes, logging, recovery and request ids."""

from __future__ import annotations

import hmac
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from researchapi.envelope import err

API_TOKEN_HEADER = "X-API-Token"
REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_KEY = "request_id"

_INTERNAL_ERROR = 500
_UNAUTHORIZED = 401

_default_logger = logging.getLogger("researchapi")


class HTTPError(Exception):
    """An error that carries the HTTP status and message to render."""

    def __init__(self, code: int, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


def as_http_error(error: BaseException | None) -> HTTPError | None:
    """Return the first HTTPError in the exception's cause/context chain."""
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        if isinstance(current, HTTPError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def _error_response(code: int, message: str) -> JSONResponse:
    return JSONResponse(err(code, message).to_dict(), status_code=code)


class APITokenMiddleware(BaseHTTPMiddleware):
    """Reject requests whose API token header is missing or wrong."""

    def __init__(self, app: ASGIApp, expected: str):
        super().__init__(app)
        self.expected = expected

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        got = request.headers.get(API_TOKEN_HEADER, "")
        if not got or not hmac.compare_digest(got.encode(), self.expected.encode()):
            return _error_response(_UNAUTHORIZED, "invalid or missing api token")
        return await call_next(request)


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Render raised exceptions as JSON error envelopes."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            http_error = as_http_error(exc)
            if http_error is not None:
                return _error_response(http_error.code, http_error.message)
            return _error_response(_INTERNAL_ERROR, "internal server error")


class LoggerMiddleware(BaseHTTPMiddleware):
    """Log one line per request with method, path, status and duration."""

    def __init__(self, app: ASGIApp, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or _default_logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        status = _INTERNAL_ERROR
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            fields = {
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": int((time.perf_counter() - start) * 1000),
                "request_id": getattr(request.state, REQUEST_ID_KEY, ""),
            }
            self.logger.info(
                "http method=%s path=%s status=%d duration_ms=%d request_id=%s",
                fields["method"],
                fields["path"],
                fields["status"],
                fields["duration_ms"],
                fields["request_id"],
                extra=fields,
            )


class RecoveryMiddleware(BaseHTTPMiddleware):
    """Turn any escaped exception into a logged 500 envelope."""

    def __init__(self, app: ASGIApp, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or _default_logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            self.logger.error("panic recovered", extra={"panic": str(exc)})
            return _error_response(_INTERNAL_ERROR, "internal server error")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or assign a request id, exposing it in state and headers."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "") or str(uuid.uuid4())
        setattr(request.state, REQUEST_ID_KEY, request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response