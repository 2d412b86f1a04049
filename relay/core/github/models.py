"""
Pydantic models for GitHub webhook payloads and the data sent to the backend
"""
from enum import Enum
from pydantic import BaseModel
from typing import Optional, List, Literal

class EventKind(str, Enum):
    REVIEW = "review"
    REVIEW_COMMENT = "review_comment"

class Account(BaseModel):
    login: Optional[str] = None
    type: Optional[str] = None

class CommitInfo(BaseModel):
    sha: str
    ref: Optional[str] = None

class PRInfo(BaseModel):
    number: int
    head: CommitInfo
    base: CommitInfo
    title: Optional[str] = None
    body: Optional[str] = None
    user: Optional[Account] = None

class RepoInfo(BaseModel):
    full_name: str
    name: str
    owner: Account

    @property
    def owner_login(self) -> str:
        return self.owner.login or self.full_name.split("/")[0]

class Review(BaseModel):
    id: Optional[int] = None
    body: Optional[str] = None
    state: Optional[str] = None  # approved, changes_requested, commented
    user: Optional[Account] = None

class ReviewComment(BaseModel):
    id: int
    body: Optional[str] = None
    path: Optional[str] = None
    diff_hunk: Optional[str] = None
    position: Optional[int] = None  # null once the comment is outdated
    user: Optional[Account] = None

class Installation(BaseModel):
    id: int

class WebhookPayload(BaseModel):
    action: str
    pull_request: PRInfo
    repository: RepoInfo
    sender: Optional[Account] = None
    review: Optional[Review] = None
    comment: Optional[ReviewComment] = None
    installation: Optional[Installation] = None

    @property
    def installation_id(self) -> Optional[int]:
        return self.installation.id if self.installation else None

class ChangedFile(BaseModel):
    filename: str
    status: str  # added, removed, modified, renamed, copied, changed, unchanged
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: Optional[str] = None
    base_content: Optional[str] = None
    head_content: Optional[str] = None

class BackendPayload(BaseModel):
    """
    Body POSTed to the analysis backend.
    Only one of the review / comment field groups is filled, depending on kind.
    """
    kind: Literal["review", "review_comment"]
    review_body: Optional[str] = None
    review_state: Optional[str] = None
    comment_body: Optional[str] = None
    comment_path: Optional[str] = None
    comment_diff_hunk: Optional[str] = None
    comment_position: Optional[int] = None
    comment_id: Optional[int] = None
    reviewer_login: Optional[str] = None
    pr_number: int
    pr_title: Optional[str] = None
    pr_body: Optional[str] = None
    pr_author_login: Optional[str] = None
    repo_full_name: str
    repo_owner: str
    repo_name: str
    files: List[ChangedFile] = []

class BackendResponse(BaseModel):
    comment: str
