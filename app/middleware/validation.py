"""
Per-request middleware: assigns the request ID, enforces the body size limit
and logs each request with its status and duration.
"""

from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import APIException, BadRequestError, PayloadTooLargeError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ValidationMiddleware(BaseHTTPMiddleware):
    """
    The request ID is stored on ``request.state.request_id`` for the error
    handlers and returned in the ``X-Request-ID`` header of every response.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_size: int = 60 * 1024 * 1024,
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            self._check_content_length(request.headers.get("content-length"))
        except APIException as exc:
            response = ErrorHandlerService.handle_api_exception(exc, request)
        else:
            response = await call_next(request)

        if self.enable_request_logging:
            elapsed = time.perf_counter() - started
            logger.info(
                f"[{request_id}] {request.method} {request.url.path} -> "
                f"{response.status_code} in {elapsed:.3f}s from {_client_ip(request)}"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _check_content_length(self, content_length: Optional[str]) -> None:
        """
        Raises:
            BadRequestError: If the header is not an integer
            PayloadTooLargeError: If the declared size is over the limit
        """
        if not content_length:
            return

        try:
            size = int(content_length)
        except ValueError:
            raise BadRequestError("Invalid content-length header")

        if size > self.max_request_size:
            raise PayloadTooLargeError(self.max_request_size)


def _client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
