import logging
import time
import uuid
from typing import Any, Dict

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from habitflow.core.logging import request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _describe(request: Request) -> Dict[str, Any]:
    url = (
        f"{request.url.path}?{request.query_params}"
        if request.query_params
        else request.url.path
    )
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "url": url,
        "client_host": request.client.host if request.client else "unknown",
    }


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and log its outcome and duration.

    An incoming ``X-Request-ID`` header is reused so ids can be correlated
    with the client; otherwise a new UUID is generated. The id is echoed back
    on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.request_id = request.headers.get(self.header_name) or str(
            uuid.uuid4()
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            log_dict = _describe(request)
            log_dict["process_time_ms"] = self._elapsed_ms(start_time)
            log_dict["exception"] = str(exc)
            logger.error(f"Unhandled exception during request: {log_dict}", exc_info=True)
            raise

        response.headers[self.header_name] = request.state.request_id

        log_dict = _describe(request)
        log_dict["status_code"] = response.status_code
        log_dict["process_time_ms"] = self._elapsed_ms(start_time)

        if response.status_code >= 500:
            logger.error(f"Request failed: {log_dict}")
        elif response.status_code >= 400:
            logger.warning(f"Request error: {log_dict}")
        else:
            logger.info(f"Request completed: {log_dict}")

        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)


class LogContextMiddleware(BaseHTTPMiddleware):
    """Expose request id, method and path to every log record of the request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = request_context.set(
            {
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "path": request.url.path,
            }
        )
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)


def register_middlewares(app: FastAPI) -> None:
    """
    Register all middlewares with the FastAPI app.

    Middleware runs in reverse order of registration, so LogContextMiddleware
    (registered first) sees the request id set by RequestIdMiddleware.
    """
    app.add_middleware(LogContextMiddleware)
    app.add_middleware(RequestIdMiddleware, header_name=REQUEST_ID_HEADER)
