"""
Enumerations shared by the gates and the webhook sender.
"""
from enum import Enum


class Event(str, Enum):
    """Webhook event identifiers emitted by the upload service"""
    SESSION_CREATED = "session.created"
    SESSION_COMPLETED = "session.completed"
    SESSION_FAILED = "session.failed"
    FILE_UPLOADED = "file.uploaded"
    FILE_DELETED = "file.deleted"
