"""Upload-session auth gate and signed webhook receiver for FastAPI."""
from lancer.common.enums import Event
from lancer.core.gatekeeper import Lancer, lancer
from lancer.schemas.session import AuthResult, SessionRequest
from lancer.schemas.webhook import FileRecord, SessionRecord, WebhookEvent
from lancer.utils.security import sign_payload, verify_signature

__version__ = "1.0.0"

__all__ = [
    "Lancer",
    "lancer",
    "AuthResult",
    "SessionRequest",
    "WebhookEvent",
    "SessionRecord",
    "FileRecord",
    "Event",
    "sign_payload",
    "verify_signature",
]
