from __future__ import annotations

import asyncio
import os
import sys
import uuid

import httpx

from . import __version__
from .changeset import fetch_changed_files
from .comment import render_failure_comment
from .config import GateConfig
from .constants import FAILURE_REASON, NO_FILES_NOTICE, WRONG_EVENT_WARNING, ExitCode
from .context import GitHubContext
from .errors import ConfigError, GateError
from .github import GitHubClient, build_transport
from .lint import EipwCliEngine, LintEngine, run_lint
from .logging import GateLogger
from .models import AnnotationLevel, GateResult, GateStatus
from .options import resolve_severity_config
from .reporter import DiagnosticReporter
from .runtime import WorkflowCommandSink, write_github_outputs, write_step_summary
from .selection import parse_unchecked, select_files


def _skip_wrong_event(sink: WorkflowCommandSink) -> GateResult:
    sink.warning(WRONG_EVENT_WARNING)
    return GateResult(status=GateStatus.PASSED, reason=WRONG_EVENT_WARNING)


async def run_gate(
    config: GateConfig,
    ctx: GitHubContext,
    gh: GitHubClient,
    engine: LintEngine,
    sink: WorkflowCommandSink,
    logger: GateLogger,
) -> GateResult:
    """Fetch, select, lint and report for one pull request."""
    if not ctx.is_pull_request:
        return _skip_wrong_event(sink)

    if not (ctx.repo_owner and ctx.repo_name and ctx.pr_number):
        raise ConfigError("event payload does not describe a pull request")

    unchecked = parse_unchecked(config.unchecked)

    with logger.stage("fetch"):
        changed = await fetch_changed_files(gh, ctx.repo_owner, ctx.repo_name, ctx.pr_number)

    with logger.stage("select"):
        files = select_files(
            changed,
            config.include_patterns(),
            unchecked,
            working_directory=config.working_directory,
            logger=logger,
        )
    logger.info("files_selected", changed=len(changed), selected=len(files))

    if not files:
        sink.notice(NO_FILES_NOTICE)
        return GateResult(status=GateStatus.PASSED, reason=NO_FILES_NOTICE)

    severity_config = resolve_severity_config(
        deny=config.deny_checks,
        warn=config.warn_checks,
        allow=config.allow_checks,
        options_file=config.options_file or None,
    )

    with logger.stage("lint"):
        diagnostics = await run_lint(engine, files, severity_config)

    with logger.stage("report"):
        report = DiagnosticReporter(engine, sink, logger).report(diagnostics)

    result = GateResult(
        status=GateStatus.PASSED,
        reason=f"{len(files)} file(s) checked, no errors",
        verdict=report.verdict,
        files=tuple(files),
        annotations=report.annotations,
    )
    if not report.verdict.has_errors:
        return result

    result.status = GateStatus.FAILED
    result.reason = FAILURE_REASON
    body = render_failure_comment(
        head_sha=ctx.head_sha,
        run_url=ctx.run_url,
        repo_full_name=ctx.repo_full_name,
        pr_number=ctx.pr_number,
        error_count=result.count(AnnotationLevel.ERROR),
    )
    try:
        with logger.stage("comment"):
            result.comment_url = await gh.create_issue_comment(
                ctx.repo_owner, ctx.repo_name, ctx.pr_number, body
            )
    except (GateError, httpx.HTTPError) as exc:
        logger.warning("Failed to post summary comment", annotate=False, error=str(exc))
    return result


def main() -> int:
    """Main entry point."""
    return asyncio.run(async_main())


async def _gate_pull_request(
    config: GateConfig,
    ctx: GitHubContext,
    sink: WorkflowCommandSink,
    logger: GateLogger,
) -> GateResult:
    token = config.token.get_secret_value() or os.environ.get("GITHUB_TOKEN", "")
    if not token:
        raise ConfigError("Input required and not supplied: token")

    logger.info(
        "eipgate starting",
        repo=ctx.repo_full_name,
        event=ctx.event_name,
        pr_number=ctx.pr_number,
        head_sha=ctx.head_sha,
    )
    gh = GitHubClient(build_transport(token, logger))
    try:
        engine = EipwCliEngine(binary=config.eipw_path, timeout=config.lint_timeout)
        return await run_gate(config, ctx, gh, engine, sink, logger)
    finally:
        await gh.aclose()


async def async_main() -> int:
    """Async main entry point."""
    run_id = os.environ.get("GITHUB_RUN_ID") or str(uuid.uuid4())
    logger = GateLogger(run_id)
    sink = WorkflowCommandSink()
    failure_code = ExitCode.FAILURE

    try:
        config = GateConfig()
        ctx = GitHubContext.from_environment()
        if ctx.is_pull_request:
            result = await _gate_pull_request(config, ctx, sink, logger)
        else:
            # Wrong trigger passes before any input is required.
            result = _skip_wrong_event(sink)
    except Exception as exc:
        # set_failed below carries the message; keep this record out of the annotations.
        logger.error("gate_exception", annotate=False, error_type=type(exc).__name__, error=str(exc))
        result = GateResult(status=GateStatus.FAILED, reason=str(exc) or "failed")
        if isinstance(exc, GateError):
            failure_code = exc.exit_code

    exit_code = ExitCode.SUCCESS
    if result.status == GateStatus.FAILED:
        sink.set_failed(result.reason)
        exit_code = failure_code

    try:
        write_github_outputs(result)
        write_step_summary(result, __version__)
    except OSError as exc:
        logger.warning("Failed to publish run outputs", error=str(exc))

    logger.info("eipgate finished", status=result.status.value, exit_code=int(exit_code))
    return int(exit_code)


if __name__ == "__main__":
    sys.exit(main())
