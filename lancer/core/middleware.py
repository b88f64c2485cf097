from typing import Callable
import time
import uuid

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lancer.utils.logging import get_request_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging requests that pass through the gates.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Log request details and processing time.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            HTTP response
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        logger = get_request_logger(
            __name__,
            request_id,
            request.client.host if request.client else None,
        )

        start_time = time.time()
        logger.info(f"Request started | Method: {request.method} | Path: {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed | Error: {str(e)} | Time: {process_time:.4f}s",
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            f"Request completed | Status: {response.status_code} | Time: {process_time:.4f}s"
        )
        return response


def setup_middlewares(app: FastAPI) -> None:
    """Install the gatekeeper middlewares on an application."""
    app.add_middleware(RequestLoggingMiddleware)
