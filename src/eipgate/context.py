from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import PULL_REQUEST_EVENTS


def _load_event() -> Dict[str, Any]:
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return {}
    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _coerce_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class GitHubContext:
    """Immutable GitHub Actions context."""

    # Repository the workflow runs in, "owner/name"
    repo_full_name: str

    # Event
    event_name: str

    # Base repository of the pull request (None if not a PR)
    repo_owner: Optional[str]
    repo_name: Optional[str]
    pr_number: Optional[int]
    head_sha: str

    # Run
    run_id: Optional[str]
    server_url: str

    @classmethod
    def from_environment(cls) -> "GitHubContext":
        """Load context from GitHub Actions environment."""
        event = _load_event()

        repo_full_name = (
            os.environ.get("GITHUB_REPOSITORY")
            or (event.get("repository") or {}).get("full_name")
            or ""
        )
        if not repo_full_name or "/" not in repo_full_name:
            raise RuntimeError("Missing or invalid GITHUB_REPOSITORY")

        event_name = os.environ.get("GITHUB_EVENT_NAME") or ""
        if not event_name:
            raise RuntimeError("Missing GITHUB_EVENT_NAME")

        pr = event.get("pull_request") or {}
        if pr:
            base_repo = (pr.get("base") or {}).get("repo") or {}
            repo_owner = (base_repo.get("owner") or {}).get("login")
            repo_name = base_repo.get("name")
            pr_number = _coerce_int(pr.get("number") or event.get("number"))
            head_sha = (pr.get("head") or {}).get("sha") or os.environ.get("GITHUB_SHA", "")
        else:
            repo_owner = None
            repo_name = None
            pr_number = None
            head_sha = os.environ.get("GITHUB_SHA", "")

        if pr and not (repo_owner and repo_name):
            repo_owner, repo_name = repo_full_name.split("/", 1)

        return cls(
            repo_full_name=repo_full_name,
            event_name=event_name,
            repo_owner=repo_owner,
            repo_name=repo_name,
            pr_number=pr_number,
            head_sha=head_sha,
            run_id=os.environ.get("GITHUB_RUN_ID") or None,
            server_url=os.environ.get("GITHUB_SERVER_URL", "https://github.com"),
        )

    @property
    def is_pull_request(self) -> bool:
        return self.event_name in PULL_REQUEST_EVENTS

    @property
    def run_url(self) -> Optional[str]:
        if not self.run_id:
            return None
        return f"{self.server_url}/{self.repo_full_name}/actions/runs/{self.run_id}"
