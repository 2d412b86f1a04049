"""
Event router
Runs one shared flow for both review events: filter, collect PR files,
ask the backend, post its answer back to GitHub.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from relay.core.backend import BackendNotifier
from relay.core.errors import RelayError
from relay.core.github.client import GitHubClient
from relay.core.github.collector import PRFileCollector
from relay.core.github.models import BackendPayload, ChangedFile, EventKind, WebhookPayload
from relay.core.github.webhook import is_from_bot, parse_webhook_payload

logger = logging.getLogger(__name__)


class HandlerOutcome(str, Enum):
    SKIPPED_BOT = "skipped_bot"
    SKIPPED_EMPTY = "skipped_empty"
    NO_COMMENT = "no_comment"
    POSTED = "posted"
    FAILED = "failed"


@dataclass
class HandlerResult:
    kind: EventKind
    outcome: HandlerOutcome
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def trigger_text(kind: EventKind, event: WebhookPayload) -> str:
    """Text that triggered the event: the review body or the inline comment body."""
    if kind is EventKind.REVIEW:
        return (event.review.body if event.review else None) or ""
    return (event.comment.body if event.comment else None) or ""


def build_payload(kind: EventKind, event: WebhookPayload, files: List[ChangedFile]) -> BackendPayload:
    """
    Build the backend payload for an event.
    Fields of the other kind are left as None.
    """
    pr = event.pull_request
    repo = event.repository
    common = dict(
        kind=kind.value,
        pr_number=pr.number,
        pr_title=pr.title,
        pr_body=pr.body,
        pr_author_login=pr.user.login if pr.user else None,
        repo_full_name=repo.full_name,
        repo_owner=repo.owner_login,
        repo_name=repo.name,
        files=files,
    )

    if kind is EventKind.REVIEW:
        review = event.review
        return BackendPayload(
            review_body=review.body or "",
            review_state=review.state,
            reviewer_login=review.user.login if review.user else None,
            **common,
        )

    comment = event.comment
    return BackendPayload(
        comment_body=comment.body or "",
        comment_path=comment.path,
        comment_diff_hunk=comment.diff_hunk,
        comment_position=comment.position,
        comment_id=comment.id,
        reviewer_login=comment.user.login if comment.user else None,
        **common,
    )


class EventRouter:
    """
    Dispatches review events to the shared handling flow.

    process() returns a HandlerResult carrying any RelayError;
    dispatch() is the webhook-facing adapter that logs failures and never raises.
    """

    def __init__(self,
                 client_factory: Callable[[Optional[int]], GitHubClient] = GitHubClient.from_env,
                 notifier: Optional[BackendNotifier] = None):
        self.client_factory = client_factory
        self.notifier = notifier or BackendNotifier()

    async def _post_back(self, client: GitHubClient, kind: EventKind,
                         event: WebhookPayload, body: str) -> None:
        owner = event.repository.owner_login
        repo_name = event.repository.name
        pr_number = event.pull_request.number

        if kind is EventKind.REVIEW:
            # Reply in PR conversation as a normal PR comment
            await client.create_issue_comment(owner, repo_name, pr_number, body)
        else:
            await client.create_review_comment_reply(owner, repo_name, pr_number, event.comment.id, body)

    async def process(self, kind: EventKind, event: WebhookPayload) -> HandlerResult:
        """
        Handle one review event.

        Args:
            kind: Which review event this is
            event: Parsed webhook payload

        Returns:
            HandlerResult describing what happened
        """
        if is_from_bot(event):
            logger.info(f"Skipping {kind.value} event from bot sender {event.sender.login}")
            return HandlerResult(kind, HandlerOutcome.SKIPPED_BOT)

        if not trigger_text(kind, event).strip():
            logger.info(f"{kind.value} body empty, skipping")
            return HandlerResult(kind, HandlerOutcome.SKIPPED_EMPTY)

        owner = event.repository.owner_login
        repo_name = event.repository.name
        pr = event.pull_request

        try:
            client = self.client_factory(event.installation_id)
            files = await PRFileCollector(client).collect(
                owner, repo_name, pr.number, pr.base.sha, pr.head.sha
            )

            payload = build_payload(kind, event, files)
            comment_body = await self.notifier.notify(payload)
            if comment_body is None:
                return HandlerResult(kind, HandlerOutcome.NO_COMMENT)

            await self._post_back(client, kind, event, comment_body)
        except RelayError as e:
            return HandlerResult(kind, HandlerOutcome.FAILED, error=e)

        return HandlerResult(kind, HandlerOutcome.POSTED)

    async def dispatch(self, event_name: Optional[str], payload: Dict[str, Any]) -> Optional[HandlerResult]:
        """
        Entry point for webhook deliveries. Never raises, so the delivery is always acknowledged.

        Args:
            event_name: X-GitHub-Event header value
            payload: JSON payload from GitHub

        Returns:
            HandlerResult for handled events, None for ignored or crashed ones
        """
        try:
            parsed = parse_webhook_payload(event_name, payload)
            if parsed is None:
                return None
            kind, event = parsed

            result = await self.process(kind, event)
        except Exception as e:
            logger.error(f"Unexpected error while handling {event_name}: {e}", exc_info=True)
            return None

        if result.error is not None:
            logger.error(
                f"Error while handling {kind.value} on {event.repository.full_name}#{event.pull_request.number}: "
                f"{type(result.error).__name__}: {result.error}"
            )
        else:
            logger.info(f"Handled {kind.value} on PR #{event.pull_request.number}: {result.outcome.value}")
        return result
