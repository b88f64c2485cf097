"""Client for sending signed webhook events to a lancer receiver."""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import BaseModel

from lancer.config.settings import settings
from lancer.schemas.webhook import WebhookEnvelope
from lancer.utils.logging import get_logger
from lancer.utils.security import canonical_json, sign_payload

logger = get_logger(__name__)


class WebhookSender:
    """
    Posts ``{"event": ..., "data": ...}`` bodies signed with the shared secret.

    Passing ``transport`` lets callers swap the network layer, e.g. for
    ``httpx.MockTransport`` or an ASGI app.
    """

    def __init__(
        self,
        url: str,
        signing_secret: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.signing_secret = settings.SIGNING_SECRET if signing_secret is None else signing_secret
        self.timeout = timeout
        self.transport = transport

    def build_request(
        self,
        event: Union[str, Enum],
        data: Union[BaseModel, Mapping[str, Any], None] = None,
        timestamp: Optional[str] = None,
    ) -> tuple[bytes, dict]:
        """Serialize and sign an event, returning the body bytes and headers."""
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True, exclude_none=True)
        envelope = WebhookEnvelope(
            event=event.value if isinstance(event, Enum) else event,
            data=dict(data or {}),
        )
        body = canonical_json(envelope.model_dump())

        headers = {"Content-Type": "application/json"}
        if self.signing_secret:
            timestamp, signature = sign_payload(body, self.signing_secret, timestamp)
            headers[settings.TIMESTAMP_HEADER] = timestamp
            headers[settings.SIGNATURE_HEADER] = signature
        else:
            logger.warning("Signing secret is not set. Sending unsigned webhook.")

        return body.encode("utf-8"), headers

    async def send(
        self,
        event: Union[str, Enum],
        data: Union[BaseModel, Mapping[str, Any], None] = None,
    ) -> httpx.Response:
        """Send one event and raise on a non-2xx response."""
        content, headers = self.build_request(event, data)

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    self.url,
                    content=content,
                    headers=headers,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                logger.info(
                    "Webhook delivered",
                    extra={"url": self.url, "status_code": response.status_code},
                )
                return response
        except httpx.HTTPStatusError as e:
            logger.error(
                "HTTP error delivering webhook.",
                exc_info=True,
                extra={"url": self.url, "status_code": e.response.status_code},
            )
            raise
        except httpx.RequestError:
            logger.error(
                "Request error delivering webhook.",
                exc_info=True,
                extra={"url": self.url},
            )
            raise
