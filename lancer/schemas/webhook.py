"""Pydantic schemas for webhook payloads."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionRecord(BaseModel):
    """Session-like record carried in ``data`` of session events."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    file_name: Optional[str] = None
    status: Optional[str] = None


class FileRecord(BaseModel):
    """File-like record carried in ``data`` of file events."""
    model_config = ConfigDict(extra="allow")

    id: str
    session_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    url: Optional[str] = None


class WebhookEvent(BaseModel):
    """
    Event forwarded to the caller's webhook handler.

    ``payload`` is the body's ``data`` member, passed through untouched.
    """
    event: Any = None
    payload: Any = None

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "WebhookEvent":
        return cls(event=body.get("event"), payload=body.get("data"))


class WebhookEnvelope(BaseModel):
    """Wire format of a webhook request body."""
    event: str
    data: Dict[str, Any] = Field(default_factory=dict)
