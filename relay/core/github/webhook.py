"""
Webhook validation and parsing for GitHub webhooks
"""
import hmac
import hashlib
import os
import logging
from typing import Optional, Dict, Any, Tuple
from pydantic import ValidationError
from .models import EventKind, WebhookPayload

logger = logging.getLogger(__name__)

# (X-GitHub-Event, action) pairs the relay reacts to
HANDLED_EVENTS = {
    ("pull_request_review", "submitted"): EventKind.REVIEW,
    ("pull_request_review_comment", "created"): EventKind.REVIEW_COMMENT,
}

def verify_webhook_signature(payload_body: bytes, signature_header: Optional[str]) -> bool:
    """
    Verify GitHub webhook signature using HMAC SHA256.

    Args:
        payload_body: Raw request body as bytes
        signature_header: X-Hub-Signature-256 header value

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature_header:
        logger.warning("No signature header provided")
        return False

    webhook_secret = os.getenv("GITHUB_WEBHOOK_SECRET")
    if not webhook_secret:
        logger.error("GITHUB_WEBHOOK_SECRET environment variable not set")
        return False

    # GitHub sends signature as: sha256=<hash>
    if not signature_header.startswith("sha256="):
        logger.warning(f"Invalid signature format: {signature_header}")
        return False

    expected_signature = signature_header[7:]

    computed_signature = hmac.new(
        webhook_secret.encode('utf-8'),
        payload_body,
        hashlib.sha256
    ).hexdigest()

    is_valid = hmac.compare_digest(computed_signature, expected_signature)

    if not is_valid:
        logger.warning("Webhook signature verification failed")

    return is_valid

def resolve_event_kind(event_name: Optional[str], action: Optional[str]) -> Optional[EventKind]:
    """Map a GitHub event name and action to the EventKind the relay handles, if any."""
    return HANDLED_EVENTS.get((event_name, action))

def parse_webhook_payload(event_name: Optional[str], payload: Dict[str, Any]) -> Optional[Tuple[EventKind, WebhookPayload]]:
    """
    Parse and validate webhook payload.

    Args:
        event_name: X-GitHub-Event header value
        payload: JSON payload from GitHub

    Returns:
        (EventKind, WebhookPayload) if this is a handled event, None otherwise
    """
    kind = resolve_event_kind(event_name, payload.get("action"))
    if kind is None:
        logger.info(f"Ignoring webhook: {event_name}.{payload.get('action')}")
        return None

    try:
        webhook_data = WebhookPayload(**payload)
    except ValidationError as e:
        logger.error(f"Failed to parse {event_name} payload: {e}")
        return None

    if kind is EventKind.REVIEW and webhook_data.review is None:
        logger.error(f"{event_name} payload has no review object")
        return None
    if kind is EventKind.REVIEW_COMMENT and webhook_data.comment is None:
        logger.error(f"{event_name} payload has no comment object")
        return None

    logger.info(f"Parsed webhook: {kind.value} on PR #{webhook_data.pull_request.number} in {webhook_data.repository.full_name}")
    return kind, webhook_data

def is_from_bot(event: WebhookPayload) -> bool:
    """Ignore events sent by bots (this app, dependabot, etc.)."""
    sender = event.sender
    if sender is None:
        return False
    if sender.type == "Bot":
        return True
    if sender.login and sender.login.endswith("[bot]"):
        return True
    return False
