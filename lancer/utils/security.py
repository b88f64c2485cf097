"""Webhook signing and verification utilities."""
import hashlib
import hmac
import json
import time
from typing import Any, Optional, Tuple


def compute_signature(body: str, timestamp: str, secret: str) -> str:
    """
    Compute the HMAC-SHA256 signature of a timestamped body.

    The signed message is ``"<timestamp>.<body>"``.

    Returns:
        Lowercase hex digest
    """
    message = f"{timestamp}.{body}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(body: str, timestamp: str, signature: str, secret: str) -> bool:
    """
    Verify the HMAC-SHA256 signature of a webhook body.

    Args:
        body: Canonical JSON string of the request body
        timestamp: Value of the timestamp header
        signature: Value of the signature header (hex digest)
        secret: Shared signing secret

    Returns:
        True if the signature is valid, False otherwise.
    """
    expected_signature = compute_signature(body, timestamp, secret)
    return hmac.compare_digest(
        signature.encode("utf-8"),
        expected_signature.encode("utf-8"),
    )


def sign_payload(body: str, secret: str, timestamp: Optional[str] = None) -> Tuple[str, str]:
    """
    Sign an outbound webhook body.

    Args:
        body: Canonical JSON string to be sent
        secret: Shared signing secret
        timestamp: Unix seconds as a string, defaults to now

    Returns:
        (timestamp, signature) tuple for the request headers
    """
    if timestamp is None:
        timestamp = str(int(time.time()))
    return timestamp, compute_signature(body, timestamp, secret)


# Above this magnitude JSON.stringify switches to exponent notation.
_MAX_PLAIN_INTEGRAL = 1e21


def _normalize_numbers(data: Any) -> Any:
    if isinstance(data, float) and data.is_integer() and abs(data) < _MAX_PLAIN_INTEGRAL:
        return int(data)
    if isinstance(data, dict):
        return {key: _normalize_numbers(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_normalize_numbers(item) for item in data]
    return data


def canonical_json(data: Any) -> str:
    """
    Serialize a parsed JSON body the way ``JSON.stringify`` does.

    Output is compact, keeps key order and leaves non-ASCII text unescaped.
    Integral floats are written as integers (``1.0`` becomes ``1``). Other
    floats use Python's shortest repr, which differs from JavaScript only in
    exponent spelling (``1e-07`` vs ``1e-7``) for very small or very large values.
    """
    return json.dumps(_normalize_numbers(data), separators=(",", ":"), ensure_ascii=False)


def is_timestamp_fresh(timestamp: str, tolerance_seconds: int, now: Optional[float] = None) -> bool:
    """Check that a Unix-seconds timestamp lies within ``tolerance_seconds`` of now."""
    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError):
        return False
    current = time.time() if now is None else now
    return abs(current - sent_at) <= tolerance_seconds
