from __future__ import annotations

from typing import List

from .constants import Limits
from .errors import TransportError
from .github import GitHubClient
from .models import ChangedFile


async def fetch_changed_files(
    gh: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
    per_page: int = Limits.PER_PAGE,
) -> List[ChangedFile]:
    """
    Return every file changed by the pull request, in API order.

    Pages are requested one at a time until an empty page comes back; a short
    page is not treated as the last one.
    """
    files: List[ChangedFile] = []
    page = 1
    while True:
        result = await gh.list_pull_files(owner, repo, pull_number, page=page, per_page=per_page)
        if result.status != 200:
            raise TransportError(
                f"listing files of {owner}/{repo}#{pull_number} failed on page {page} "
                f"with status {result.status}",
                status_code=result.status,
            )
        if not result.files:
            return files
        files.extend(result.files)
        page += 1
