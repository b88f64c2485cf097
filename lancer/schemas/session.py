"""
Schemas for the upload-session auth gate.
"""
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SessionRequest(BaseModel):
    """
    Body of an inbound upload-session creation request.

    Values are kept exactly as sent, unknown fields included. The gate only
    checks that the required fields are present and truthy.
    """
    model_config = ConfigDict(extra="allow")

    chunk_size: Any
    file_name: Any
    file_size: Any
    max_chunk: Any
    mime_type: Any
    provider: Any


class AuthResult(BaseModel):
    """Outcome of the caller's auth handler."""
    model_config = ConfigDict(populate_by_name=True)

    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    status: int = Field(..., ge=100, le=599)

    @classmethod
    def coerce(cls, value: Union["AuthResult", Mapping[str, Any]]) -> "AuthResult":
        """Accept either an AuthResult or a plain mapping from the handler."""
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    def response_body(self) -> dict:
        """JSON body echoed back to the client."""
        return self.model_dump(by_alias=True, exclude_none=True, include={"owner_id"})
