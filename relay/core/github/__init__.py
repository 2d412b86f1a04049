"""
GitHub Integration Module for Review Relay
Handles webhooks, PR file collection, and comment posting
"""

from .webhook import verify_webhook_signature, parse_webhook_payload, resolve_event_kind, is_from_bot
from .client import GitHubClient
from .collector import PRFileCollector
from .models import EventKind, WebhookPayload, ChangedFile, BackendPayload

__all__ = [
    "verify_webhook_signature",
    "parse_webhook_payload",
    "resolve_event_kind",
    "is_from_bot",
    "GitHubClient",
    "PRFileCollector",
    "EventKind",
    "WebhookPayload",
    "ChangedFile",
    "BackendPayload",
]
