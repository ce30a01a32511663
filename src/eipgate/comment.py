from __future__ import annotations

from typing import Optional

MARKER_PREFIX = "<!-- eipgate:failure:v1:"


def marker(repo_full_name: str, pr_number: int) -> str:
    return f"{MARKER_PREFIX}{repo_full_name}:{pr_number} -->"


def render_failure_comment(
    *,
    head_sha: str,
    run_url: Optional[str],
    repo_full_name: str,
    pr_number: int,
    error_count: int,
) -> str:
    """Body of the one comment posted when lint errors fail the run."""
    noun = "error" if error_count == 1 else "errors"
    lines = [
        marker(repo_full_name, pr_number),
        f"The commit {head_sha} contains {error_count} {noun}.",
    ]
    if run_url:
        lines.append(f"Please inspect the [Run Summary]({run_url}) for details.")
    else:
        lines.append("Please inspect the workflow run annotations for details.")
    return "\n".join(lines)
