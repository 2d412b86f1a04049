import copy
from typing import Dict, List, Optional

import pytest

from relay.core.errors import CommentPostError, FileListingError


def make_file_entry(filename: str, status: str = "modified", patch: Optional[str] = "@@ -1 +1 @@\n-a\n+b") -> dict:
    return {
        "filename": filename,
        "status": status,
        "additions": 1,
        "deletions": 1,
        "changes": 2,
        "patch": patch,
    }


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(self, files: Optional[List[dict]] = None, contents: Optional[Dict[tuple, str]] = None,
                 page_size: int = 100, fail_listing: bool = False, fail_posting: bool = False):
        self.files = files or []
        self.contents = contents
        self.page_size = page_size
        self.fail_listing = fail_listing
        self.fail_posting = fail_posting
        self.page_calls: List[int] = []
        self.content_calls: List[tuple] = []
        self.issue_comments: List[tuple] = []
        self.replies: List[tuple] = []

    async def list_pr_files_page(self, owner, repo, pr_number, page):
        self.page_calls.append(page)
        if self.fail_listing:
            raise FileListingError(f"Failed to list files for {owner}/{repo}#{pr_number}")
        start = (page - 1) * self.page_size
        return copy.deepcopy(self.files[start:start + self.page_size])

    async def get_file_content(self, owner, repo, path, ref):
        self.content_calls.append((path, ref))
        if self.contents is None:
            return f"{path}@{ref}"
        return self.contents.get((path, ref))

    async def create_issue_comment(self, owner, repo, pr_number, body):
        if self.fail_posting:
            raise CommentPostError("Failed to comment")
        self.issue_comments.append((owner, repo, pr_number, body))

    async def create_review_comment_reply(self, owner, repo, pr_number, comment_id, body):
        if self.fail_posting:
            raise CommentPostError("Failed to reply")
        self.replies.append((owner, repo, pr_number, comment_id, body))


class FakeNotifier:
    def __init__(self, comment: Optional[str] = None):
        self.comment = comment
        self.payloads = []

    async def notify(self, payload):
        self.payloads.append(payload)
        return self.comment


def _base_event(action: str, sender: Optional[dict]) -> dict:
    event = {
        "action": action,
        "pull_request": {
            "number": 42,
            "title": "Add widget",
            "body": "Adds the widget",
            "user": {"login": "author", "type": "User"},
            "base": {"sha": "base-sha", "ref": "main"},
            "head": {"sha": "head-sha", "ref": "feature/widget"},
        },
        "repository": {
            "full_name": "octo/widgets",
            "name": "widgets",
            "owner": {"login": "octo", "type": "Organization"},
        },
    }
    if sender is not None:
        event["sender"] = sender
    return event


@pytest.fixture
def fake_client():
    return FakeGitHubClient(files=[make_file_entry("src/a.js")])


@pytest.fixture
def review_event():
    def _make(body="Looks good", state="approved", sender=None):
        sender = sender if sender is not None else {"login": "reviewer", "type": "User"}
        event = _base_event("submitted", sender)
        event["review"] = {"id": 7, "body": body, "state": state, "user": {"login": sender.get("login")}}
        return event
    return _make


@pytest.fixture
def review_comment_event():
    def _make(body="Why not a constant?", path="src/a.js", position=5, sender=None):
        sender = sender if sender is not None else {"login": "reviewer", "type": "User"}
        event = _base_event("created", sender)
        event["comment"] = {
            "id": 9001,
            "body": body,
            "path": path,
            "diff_hunk": "@@ -1,3 +1,4 @@\n+const x = 5;",
            "position": position,
            "user": {"login": sender.get("login")},
        }
        return event
    return _make
