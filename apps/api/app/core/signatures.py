"""Webhook signature helpers."""

from __future__ import annotations

import hashlib
import hmac


def compute_webhook_signature(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw body, as sent in ``X-Razorpay-Signature``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def is_valid_webhook_signature(*, secret: str, body: bytes, signature: str | None) -> bool:
    if not signature or not secret:
        return False
    expected = compute_webhook_signature(secret, body)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))
