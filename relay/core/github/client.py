"""
GitHub API Client using PyGithub
Handles listing PR files, fetching file contents and posting comments.
PyGithub is synchronous, so every call runs in a worker thread.
"""
import asyncio
import base64
import logging
import os
from typing import Any, Dict, List, Optional, Tuple
from github import Auth, Github, GithubException, GithubIntegration
from github.PaginatedList import PaginatedList
from github.Repository import Repository
from relay.core.errors import (
    CommentPostError,
    ConfigurationError,
    ContentFetchError,
    FileListingError,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

class GitHubClient:
    """
    Wrapper around PyGithub for the calls the relay needs.
    Authenticates with a GitHub App installation token or with GITHUB_TOKEN.
    """

    def __init__(self, github: Optional[Github] = None):
        if github is None:
            token = os.getenv("GITHUB_TOKEN")
            if not token:
                raise ConfigurationError("GITHUB_TOKEN environment variable not set")
            github = Github(auth=Auth.Token(token), per_page=PAGE_SIZE, retry=None)
        self.github = github
        # files listing per PR, reused across pages
        self._pr_files: Dict[Tuple[str, str, int], PaginatedList] = {}

    @classmethod
    def for_installation(cls, installation_id: int) -> "GitHubClient":
        """
        Build a client authenticated as a GitHub App installation.

        Args:
            installation_id: Installation id from the webhook payload

        Returns:
            GitHubClient using a fresh installation access token
        """
        raw_app_id = os.getenv("GITHUB_APP_ID")
        private_key_path = os.getenv("GITHUB_PRIVATE_KEY_PATH")
        if not raw_app_id or not private_key_path:
            raise ConfigurationError("GITHUB_APP_ID and GITHUB_PRIVATE_KEY_PATH must both be set")
        try:
            app_id = int(raw_app_id)
        except ValueError:
            raise ConfigurationError(f"GitHub App ID must be an integer, got: {raw_app_id}")

        try:
            with open(private_key_path, "r") as f:
                private_key = f.read()
            integration = GithubIntegration(auth=Auth.AppAuth(app_id, private_key), retry=None)
            access = integration.get_access_token(installation_id)
        except (OSError, GithubException) as e:
            raise ConfigurationError(f"Could not authenticate installation {installation_id}: {e}") from e

        return cls(Github(auth=Auth.Token(access.token), per_page=PAGE_SIZE, retry=None))

    @classmethod
    def from_env(cls, installation_id: Optional[int] = None) -> "GitHubClient":
        """Pick App auth when the delivery names an installation and the App is configured."""
        if installation_id is not None and os.getenv("GITHUB_APP_ID"):
            return cls.for_installation(installation_id)
        return cls()

    def _get_repository(self, owner: str, repo: str) -> Repository:
        return self.github.get_repo(f"{owner}/{repo}", lazy=True)

    async def list_pr_files_page(self, owner: str, repo: str, pr_number: int, page: int) -> List[Dict[str, Any]]:
        """
        Get one page of changed files for a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            page: 1-based page number, PAGE_SIZE entries per page

        Returns:
            List of dicts with filename, status, additions, deletions, changes, patch
        """
        def _get_page():
            key = (owner, repo, pr_number)
            if key not in self._pr_files:
                pr = self._get_repository(owner, repo).get_pull(pr_number)
                self._pr_files[key] = pr.get_files()
            # PaginatedList pages are 0-based
            return [
                {
                    "filename": f.filename,
                    "status": f.status,
                    "additions": f.additions,
                    "deletions": f.deletions,
                    "changes": f.changes,
                    "patch": f.patch,
                }
                for f in self._pr_files[key].get_page(page - 1)
            ]

        try:
            return await asyncio.to_thread(_get_page)
        except Exception as e:
            raise FileListingError(
                f"Failed to list files for {owner}/{repo}#{pr_number} (page {page}): {e}"
            ) from e

    async def _read_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[str]:
        def _fetch():
            return self._get_repository(owner, repo).get_contents(path, ref=ref)

        try:
            content = await asyncio.to_thread(_fetch)
        except Exception as e:
            raise ContentFetchError(f"GitHub lookup failed: {e}", path=path, ref=ref) from e

        # Directory listing, submodule or a file too large to inline
        if isinstance(content, list) or not content.content:
            logger.debug(f"No inline content for {path} at {ref}, skipping")
            return None

        encoding = content.encoding or "base64"
        try:
            if encoding == "base64":
                raw = base64.b64decode(content.content)
            elif encoding in ("utf-8", "utf8"):
                raw = content.content.encode("utf-8")
            else:
                raise ContentFetchError(f"Unsupported content encoding: {encoding}", path=path, ref=ref)
            return raw.decode("utf-8")
        except ValueError as e:
            # binascii.Error and UnicodeDecodeError are both ValueErrors
            raise ContentFetchError(f"Content is not UTF-8 text: {e}", path=path, ref=ref) from e

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> Optional[str]:
        """
        Get the text of a file at a given ref.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Path to file in repository
            ref: Git reference (branch, commit SHA, etc.)

        Returns:
            File content as string, or None if it cannot be read as a single text file
        """
        try:
            return await self._read_content(owner, repo, path, ref)
        except Exception as e:
            logger.error(
                f"Failed to fetch file content for {path} at {ref}: {e}",
                extra={"path": path, "ref": ref},
            )
            return None

    async def create_issue_comment(self, owner: str, repo: str, pr_number: int, body: str) -> None:
        """Post a top-level comment on the PR conversation."""
        def _post():
            self._get_repository(owner, repo).get_issue(pr_number).create_comment(body)

        try:
            await asyncio.to_thread(_post)
        except Exception as e:
            raise CommentPostError(f"Failed to comment on {owner}/{repo}#{pr_number}: {e}") from e
        logger.info(f"Posted comment on PR #{pr_number} in {owner}/{repo}")

    async def create_review_comment_reply(self, owner: str, repo: str, pr_number: int,
                                          comment_id: int, body: str) -> None:
        """Reply inside the thread of an inline review comment."""
        def _reply():
            pr = self._get_repository(owner, repo).get_pull(pr_number)
            pr.create_review_comment_reply(comment_id, body)

        try:
            await asyncio.to_thread(_reply)
        except Exception as e:
            raise CommentPostError(
                f"Failed to reply to review comment {comment_id} on {owner}/{repo}#{pr_number}: {e}"
            ) from e
        logger.info(f"Replied to inline review comment {comment_id} on PR #{pr_number}")
