"""
Pull request file collector
Lists every changed file of a PR and attaches the before/after file contents
"""
import logging
from typing import List
from .client import GitHubClient, PAGE_SIZE
from .models import ChangedFile

logger = logging.getLogger(__name__)

class PRFileCollector:
    """
    Assembles ChangedFile entries for a pull request.
    Pages through the file listing, then resolves base/head content per file, one at a time.
    """

    def __init__(self, github_client: GitHubClient):
        self.github_client = github_client

    async def collect(self, owner: str, repo: str, pr_number: int,
                      base_sha: str, head_sha: str) -> List[ChangedFile]:
        """
        Get changed files for a PR with full content before and after the change.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            base_sha: Commit the PR is based on
            head_sha: Tip commit of the PR

        Returns:
            ChangedFile list in the order GitHub returned it

        Raises:
            FileListingError: if a page of the file listing cannot be fetched
        """
        files: List[ChangedFile] = []
        page = 1

        while True:
            entries = await self.github_client.list_pr_files_page(owner, repo, pr_number, page)
            if not entries:
                break

            for entry in entries:
                files.append(await self._assemble(owner, repo, entry, base_sha, head_sha))

            if len(entries) < PAGE_SIZE:
                break
            page += 1

        logger.info(f"Collected {len(files)} changed files for PR #{pr_number} in {owner}/{repo}")
        return files

    async def _assemble(self, owner: str, repo: str, entry: dict,
                        base_sha: str, head_sha: str) -> ChangedFile:
        filename = entry["filename"]
        status = entry["status"]

        # Added files have no "before", removed files have no "after"
        base_content = None
        if status != "added":
            base_content = await self.github_client.get_file_content(owner, repo, filename, base_sha)

        head_content = None
        if status != "removed":
            head_content = await self.github_client.get_file_content(owner, repo, filename, head_sha)

        return ChangedFile(
            filename=filename,
            status=status,
            additions=entry.get("additions") or 0,
            deletions=entry.get("deletions") or 0,
            changes=entry.get("changes") or 0,
            patch=entry.get("patch") or None,
            base_content=base_content,
            head_content=head_content,
        )
