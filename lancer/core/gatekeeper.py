"""
Gatekeeper endpoints for upload-session auth and signed webhooks.

``Lancer.auth`` and ``Lancer.webhook`` wrap caller-supplied handlers into
FastAPI endpoints::

    gate = lancer(signing_secret=settings.SIGNING_SECRET)
    app.add_api_route("/sessions", gate.auth(resolve_owner), methods=["POST"])
    app.add_api_route("/webhooks", gate.webhook(on_event, verification=True), methods=["POST"])
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer
from starlette import status

from lancer.common.constants import SESSION_REQUIRED_FIELDS
from lancer.config.settings import settings
from lancer.schemas.session import AuthResult, SessionRequest
from lancer.schemas.webhook import WebhookEvent
from lancer.utils.logging import get_logger
from lancer.utils.security import canonical_json, is_timestamp_fresh, verify_signature

logger = get_logger(__name__)

AuthHandler = Callable[..., Union[AuthResult, Mapping[str, Any], Awaitable[Any]]]
WebhookHandler = Callable[..., Union[bool, Awaitable[bool]]]
Endpoint = Callable[[Request], Awaitable[Response]]

bearer_scheme = HTTPBearer(auto_error=False)


class HandlerTimeoutError(Exception):
    """Raised when a caller handler outlives the gate's own deadline."""

    def __init__(self, timeout: float):
        super().__init__(f"Handler did not finish within {timeout}s")
        self.timeout = timeout


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def _read_json(request: Request) -> Any:
    """Parse the request body as JSON, returning None when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _missing_fields(body: Mapping[str, Any]) -> list:
    return [field for field in SESSION_REQUIRED_FIELDS if not body.get(field)]


class Lancer:
    """
    Factory for the session auth gate and the webhook gate.

    Args:
        signing_secret: Shared HMAC secret, defaults to ``LANCER_SIGNING_SECRET``
        signature_header: Header carrying the hex signature
        timestamp_header: Header carrying the signing timestamp
        tolerance_seconds: Reject signed requests whose timestamp is further
            than this from now. None disables the check.
        handler_timeout: Deadline in seconds for caller handlers. None waits
            indefinitely.
    """

    def __init__(
        self,
        signing_secret: Optional[str] = None,
        *,
        signature_header: Optional[str] = None,
        timestamp_header: Optional[str] = None,
        tolerance_seconds: Optional[int] = None,
        handler_timeout: Optional[float] = None,
    ):
        self.signing_secret = settings.SIGNING_SECRET if signing_secret is None else signing_secret
        self.signature_header = signature_header or settings.SIGNATURE_HEADER
        self.timestamp_header = timestamp_header or settings.TIMESTAMP_HEADER
        self.tolerance_seconds = (
            settings.SIGNATURE_TOLERANCE_SECONDS if tolerance_seconds is None else tolerance_seconds
        )
        self.handler_timeout = (
            settings.HANDLER_TIMEOUT_SECONDS if handler_timeout is None else handler_timeout
        )

    async def _call_handler(self, handler: Callable[..., Any], **kwargs: Any) -> Any:
        """
        Invoke a caller handler, awaiting its result when it returns an awaitable.

        Raises:
            HandlerTimeoutError: If ``handler_timeout`` elapses first. Exceptions
                raised by the handler itself, ``TimeoutError`` included, propagate
                unchanged.
        """
        try:
            result = handler(**kwargs)
            if not inspect.isawaitable(result):
                return result
            if not self.handler_timeout:
                return await result

            task = asyncio.ensure_future(result)
            try:
                done, _ = await asyncio.wait({task}, timeout=self.handler_timeout)
            finally:
                if not task.done():
                    task.cancel()
            if not done:
                raise HandlerTimeoutError(self.handler_timeout)
            return task.result()
        except HandlerTimeoutError:
            raise
        except Exception as e:
            logger.error(
                f"Handler {getattr(handler, '__name__', handler)!r} failed: {e}",
                exc_info=True,
            )
            raise

    def auth(self, handler: AuthHandler) -> Endpoint:
        """
        Build the upload-session auth endpoint.

        The handler is called as ``handler(token=..., session=SessionRequest)``
        and must return an ``AuthResult`` (or a mapping with ``ownerId`` and
        ``status``).

        Responses:
            403: No bearer token
            422: Body is not an object or a required session field is missing or falsy
            <result.status>: ``{"ownerId": ...}`` from the handler
        """

        async def auth_endpoint(request: Request) -> Response:
            credentials = await bearer_scheme(request)
            if not credentials or not credentials.credentials:
                logger.warning(
                    "Session request rejected: missing bearer token",
                    extra={"path": request.url.path, "client_ip": _client_host(request)},
                )
                return Response(status_code=status.HTTP_403_FORBIDDEN)

            body = await _read_json(request)
            if not isinstance(body, dict):
                logger.warning(
                    "Session request rejected: body is not a JSON object",
                    extra={"path": request.url.path, "client_ip": _client_host(request)},
                )
                return Response(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

            missing = _missing_fields(body)
            if missing:
                logger.warning(
                    "Session request rejected: missing required fields",
                    extra={"path": request.url.path, "missing_fields": missing},
                )
                return Response(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

            session = SessionRequest.model_validate(body)

            try:
                result = await self._call_handler(
                    handler, token=credentials.credentials, session=session
                )
            except HandlerTimeoutError:
                logger.error(
                    f"Auth handler timed out after {self.handler_timeout}s",
                    extra={"path": request.url.path},
                )
                return Response(status_code=status.HTTP_504_GATEWAY_TIMEOUT)

            ack = AuthResult.coerce(result)
            logger.info(
                f"Session request resolved with status {ack.status}",
                extra={"file_name": session.file_name, "owner_id": ack.owner_id},
            )
            return JSONResponse(status_code=ack.status, content=ack.response_body())

        return auth_endpoint

    def webhook(self, handler: WebhookHandler, verification: bool = False) -> Endpoint:
        """
        Build the webhook receiver endpoint.

        With ``verification`` on, the signature header must hold
        ``HMAC-SHA256(secret, "<timestamp>.<canonical body>")``. The handler is
        called as ``handler(event=body["event"], payload=body["data"])`` and
        its truthiness decides the response.

        Responses:
            400: Missing or invalid signature, non-object signed body, or handler declined
            200: Handler acknowledged the event

        Raises:
            ValueError: If verification is requested without a signing secret
        """
        if verification and not self.signing_secret:
            raise ValueError("Webhook verification requires a signing secret")

        async def webhook_endpoint(request: Request) -> Response:
            body = await _read_json(request)

            if verification:
                signature = request.headers.get(self.signature_header)
                timestamp = request.headers.get(self.timestamp_header)
                if not signature or not timestamp:
                    logger.warning(
                        "Webhook rejected: missing signature headers",
                        extra={"path": request.url.path, "client_ip": _client_host(request)},
                    )
                    return Response(status_code=status.HTTP_400_BAD_REQUEST)

                if body is None or not verify_signature(
                    canonical_json(body), timestamp, signature, self.signing_secret
                ):
                    logger.warning(
                        "Webhook rejected: invalid signature",
                        extra={"path": request.url.path, "client_ip": _client_host(request)},
                    )
                    return Response(status_code=status.HTTP_400_BAD_REQUEST)

                if self.tolerance_seconds is not None and not is_timestamp_fresh(
                    timestamp, self.tolerance_seconds
                ):
                    logger.warning(
                        "Webhook rejected: timestamp outside tolerance",
                        extra={"path": request.url.path, "timestamp": timestamp},
                    )
                    return Response(status_code=status.HTTP_400_BAD_REQUEST)

            if not isinstance(body, dict):
                if verification:
                    logger.warning(
                        "Webhook rejected: body is not a JSON object",
                        extra={"path": request.url.path},
                    )
                    return Response(status_code=status.HTTP_400_BAD_REQUEST)
                body = {}

            event = WebhookEvent.from_body(body)
            try:
                ack = await self._call_handler(handler, event=event.event, payload=event.payload)
            except HandlerTimeoutError:
                logger.error(
                    f"Webhook handler timed out after {self.handler_timeout}s",
                    extra={"path": request.url.path, "event": event.event},
                )
                return Response(status_code=status.HTTP_504_GATEWAY_TIMEOUT)

            if ack:
                logger.info("Webhook acknowledged", extra={"event": event.event})
                return Response(status_code=status.HTTP_200_OK)

            logger.warning("Webhook declined by handler", extra={"event": event.event})
            return Response(status_code=status.HTTP_400_BAD_REQUEST)

        return webhook_endpoint


def lancer(signing_secret: Optional[str] = None, **options: Any) -> Lancer:
    """Create a configured ``Lancer`` gatekeeper."""
    return Lancer(signing_secret, **options)
