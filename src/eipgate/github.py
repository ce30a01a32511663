from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from .constants import Limits
from .errors import TransportError
from .logging import GateLogger
from .models import ChangedFile
from .transport import RateLimitedTransport, ThrottlePolicy

GITHUB_API = os.environ.get("GITHUB_API_URL", "https://api.github.com")
DEFAULT_HTTP_TIMEOUT_SECONDS = float(
    os.environ.get("EIPGATE_GITHUB_HTTP_TIMEOUT_SECONDS", str(Limits.HTTP_TIMEOUT_SECONDS))
)


@dataclass(frozen=True)
class FilesPage:
    status: int
    files: List[ChangedFile] = field(default_factory=list)


def build_transport(token: str, logger: GateLogger) -> RateLimitedTransport:
    client = httpx.AsyncClient(
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "eipgate-action",
        },
        timeout=DEFAULT_HTTP_TIMEOUT_SECONDS,
    )
    return RateLimitedTransport(client, ThrottlePolicy(logger))


class GitHubClient:
    def __init__(self, transport: RateLimitedTransport, api_url: str = GITHUB_API):
        self.transport = transport
        self.api_url = api_url.rstrip("/")

    async def list_pull_files(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        *,
        page: int,
        per_page: int = Limits.PER_PAGE,
    ) -> FilesPage:
        """Fetch one page of a pull request's changed files."""
        url = f"{self.api_url}/repos/{owner}/{repo}/pulls/{pull_number}/files"
        r = await self.transport.request("GET", url, params={"page": page, "per_page": per_page})
        if r.status_code != 200:
            return FilesPage(status=r.status_code)
        data = r.json()
        if not isinstance(data, list):
            raise TransportError(f"unexpected response listing files of #{pull_number}", r.status_code)
        return FilesPage(status=200, files=[ChangedFile.from_api(entry) for entry in data])

    async def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> Optional[str]:
        url = f"{self.api_url}/repos/{owner}/{repo}/issues/{number}/comments"
        r = await self.transport.request("POST", url, json={"body": body})
        if r.status_code not in (200, 201):
            raise TransportError(f"creating comment failed with status {r.status_code}", r.status_code)
        try:
            return (r.json() or {}).get("html_url")
        except ValueError:
            return None

    async def aclose(self) -> None:
        await self.transport.aclose()
