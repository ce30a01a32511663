from __future__ import annotations

from eipgate.comment import MARKER_PREFIX, render_failure_comment


def test_comment_references_commit_and_run() -> None:
    body = render_failure_comment(
        head_sha="headsha123",
        run_url="https://github.com/ethereum/EIPs/actions/runs/777",
        repo_full_name="ethereum/EIPs",
        pr_number=42,
        error_count=2,
    )
    assert body.startswith(MARKER_PREFIX)
    assert "The commit headsha123 contains 2 errors." in body
    assert "[Run Summary](https://github.com/ethereum/EIPs/actions/runs/777)" in body


def test_comment_without_run_url() -> None:
    body = render_failure_comment(
        head_sha="abc",
        run_url=None,
        repo_full_name="ethereum/EIPs",
        pr_number=1,
        error_count=1,
    )
    assert "contains 1 error." in body
    assert "Run Summary" not in body
