from __future__ import annotations

import os
import sys
from typing import Any, Dict, Optional, TextIO

from .models import Annotation, AnnotationLevel, GateResult, GateStatus


def _printable(value: Any) -> str:
    return str(value).encode("utf-8", errors="backslashreplace").decode("utf-8")


def escape_data(value: Any) -> str:
    """
    Escape a workflow command message.

    See: https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
    """
    if value is None:
        return ""
    return _printable(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: Any) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def workflow_command(command: str, message: str, properties: Optional[Dict[str, Any]] = None) -> str:
    props = ",".join(
        f"{key}={escape_property(value)}"
        for key, value in (properties or {}).items()
        if value is not None and value != ""
    )
    head = f"::{command} {props}" if props else f"::{command}"
    return f"{head}::{escape_data(message)}"


class WorkflowCommandSink:
    """Writes annotations to the runner as workflow commands."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def emit(self, annotation: Annotation) -> None:
        self._write(
            workflow_command(
                annotation.level.value,
                annotation.message,
                {"title": annotation.title, "file": annotation.file, "line": annotation.start_line},
            )
        )

    def notice(self, message: str) -> None:
        self._write(workflow_command(AnnotationLevel.NOTICE.value, message))

    def warning(self, message: str) -> None:
        self._write(workflow_command(AnnotationLevel.WARNING.value, message))

    def set_failed(self, message: str) -> None:
        self._write(workflow_command(AnnotationLevel.ERROR.value, message))


def write_github_outputs(result: GateResult) -> None:
    """Write GitHub Actions outputs."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return

    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"gate_status={result.status.value}\n")
        f.write(f"files_checked={len(result.files)}\n")
        f.write(f"error_count={result.count(AnnotationLevel.ERROR)}\n")
        f.write(f"warning_count={result.count(AnnotationLevel.WARNING)}\n")
        f.write(f"notice_count={result.count(AnnotationLevel.NOTICE)}\n")


def write_step_summary(result: GateResult, version: str) -> None:
    """Append the job summary that the failure comment links to."""
    summary_path = os.environ.get("GITHUB_STEP_SUMMARY")
    if not summary_path:
        return

    status_icon = "✅" if result.status == GateStatus.PASSED else "❌"
    md = [
        f"## eipgate: {status_icon} {result.status.value.upper()}",
        "",
        f"**Result:** {_printable(result.reason)}",
        "",
        "| Annotation | Count |",
        "|------------|------:|",
        f"| error | {result.count(AnnotationLevel.ERROR)} |",
        f"| warning | {result.count(AnnotationLevel.WARNING)} |",
        f"| notice | {result.count(AnnotationLevel.NOTICE)} |",
        "",
    ]
    if result.files:
        md.append("### Files checked")
        md.append("")
        md.extend(f"- `{path}`" for path in result.files)
        md.append("")

    errors = [a for a in result.annotations if a.level == AnnotationLevel.ERROR]
    if errors:
        md.append("### Errors")
        md.append("")
        for annotation in errors[:50]:
            where = annotation.file or "?"
            if annotation.start_line is not None:
                where = f"{where}:{annotation.start_line}"
            md.append(f"- `{_printable(where)}` {_printable(annotation.title or 'error')}")
        if len(errors) > 50:
            md.append(f"- ...and {len(errors) - 50} more")
        md.append("")

    md.append(f"<sub>eipgate v{version}</sub>")
    md.append("")

    with open(summary_path, "a", encoding="utf-8") as summary_file:
        summary_file.write("\n".join(md))
