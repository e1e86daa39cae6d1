"""Webhook authentication and delivery de-duplication."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Mapping

from domo.config import WEBHOOK_SECRET_HEADER, WEBHOOK_SIGNATURE_HEADER
from domo.errors import WebhookAuthError

logger = logging.getLogger(__name__)


def sign_body(raw_body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def verify_webhook(headers: Mapping[str, str], raw_body: bytes, secret: str) -> None:
    """Raise WebhookAuthError unless the delivery carries the shared secret
    or a valid body signature. An empty secret disables the check.
    """
    if not secret:
        return

    provided = headers.get(WEBHOOK_SECRET_HEADER)
    if provided and hmac.compare_digest(provided, secret):
        return

    signature = headers.get(WEBHOOK_SIGNATURE_HEADER)
    if signature and hmac.compare_digest(signature.lower(), sign_body(raw_body, secret)):
        return

    raise WebhookAuthError("Webhook secret or signature missing or invalid")


def event_hash(raw_body: bytes) -> str:
    """Identity of a delivery, used to ignore vendor re-sends."""
    return hashlib.sha256(raw_body).hexdigest()
