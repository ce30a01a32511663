from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .constants import DEFAULT_ENGINE, RENDER_PLACEHOLDER
from .errors import LintEngineError
from .models import Diagnostic, RenderResult, SeverityConfig

_STRONG_MARKS = {"Error", "Warning"}


class LintEngine(Protocol):
    async def lint(self, paths: Sequence[str], config: Optional[SeverityConfig] = None) -> List[Dict[str, Any]]:
        ...

    def format(self, payload: Dict[str, Any]) -> str:
        ...


def format_snippet(payload: Dict[str, Any]) -> str:
    """
    Render one engine snippet as plain text.

    Raises on malformed snippets and on text that does not survive a strict
    UTF-8 encode.
    """
    title = payload["title"]
    header = str(title["annotation_type"]).lower()
    if title.get("id"):
        header += f"[{title['id']}]"
    lines = [f"{header}: {title.get('label') or ''}"]

    slices = payload.get("slices") or []
    width = max(
        (len(str(int(s["line_start"]) + str(s["source"]).count("\n"))) for s in slices),
        default=1,
    )
    pad = " " * width

    for piece in slices:
        if piece.get("origin"):
            lines.append(f"{pad}--> {piece['origin']}")
        lines.append(f"{pad} |")
        offset = 0
        for index, text in enumerate(str(piece["source"]).split("\n")):
            number = int(piece["line_start"]) + index
            lines.append(f"{str(number).rjust(width)} | {text}".rstrip())
            line_end = offset + len(text)
            for annotation in piece.get("annotations") or []:
                start, end = annotation["range"]
                if not offset <= start <= line_end:
                    continue
                mark = "^" if annotation.get("annotation_type") in _STRONG_MARKS else "-"
                length = max(1, min(end, line_end) - start)
                label = annotation.get("label") or ""
                lines.append(f"{pad} | {' ' * (start - offset)}{mark * length} {label}".rstrip())
            offset = line_end + 1
    if slices:
        lines.append(f"{pad} |")

    for footer in payload.get("footer") or []:
        lines.append(f"{pad} = {str(footer['annotation_type']).lower()}: {footer.get('label') or ''}")

    rendered = "\n".join(lines)
    rendered.encode("utf-8")
    return rendered


def parse_engine_output(stdout: str, returncode: int, stderr: str = "") -> List[Dict[str, Any]]:
    text = (stdout or "").strip()
    if not text:
        if returncode == 0:
            return []
        detail = (stderr or "").strip()[-500:]
        raise LintEngineError(f"lint engine exited with code {returncode}: {detail or 'no output'}")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LintEngineError(f"lint engine output is not JSON: {exc}") from exc
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise LintEngineError("lint engine output is not a list of diagnostics")
    return data


class EipwCliEngine:
    """Runs the eipw executable with JSON output."""

    def __init__(self, binary: str = DEFAULT_ENGINE, timeout: int = 300):
        self.binary = binary
        self.timeout = timeout

    def build_command(self, paths: Sequence[str], config: Optional[SeverityConfig] = None) -> List[str]:
        cmd = [self.binary, "--format", "json"]
        if config is not None:
            for flag, names in (("--deny", config.deny), ("--warn", config.warn), ("--allow", config.allow)):
                for name in sorted(names):
                    cmd.extend([flag, name])
            if config.options_path:
                cmd.extend(["--config", config.options_path])
        cmd.extend(paths)
        return cmd

    async def lint(self, paths: Sequence[str], config: Optional[SeverityConfig] = None) -> List[Dict[str, Any]]:
        cmd = self.build_command(paths, config)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise LintEngineError(f"lint engine `{self.binary}` not found") from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=float(self.timeout))
        except TimeoutError as exc:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.communicate()
            raise LintEngineError(f"lint engine timed out after {self.timeout}s") from exc

        return parse_engine_output(
            (stdout_b or b"").decode("utf-8", errors="replace"),
            int(proc.returncode or 0),
            (stderr_b or b"").decode("utf-8", errors="replace"),
        )

    def format(self, payload: Dict[str, Any]) -> str:
        return format_snippet(payload)


async def run_lint(
    engine: LintEngine,
    paths: Sequence[str],
    config: Optional[SeverityConfig] = None,
) -> List[Diagnostic]:
    records = await engine.lint(list(paths), config)
    return [Diagnostic.from_payload(record) for record in records]


def render_diagnostic(engine: LintEngine, diagnostic: Diagnostic) -> RenderResult:
    """Render for display; falls back to the title, then a placeholder."""
    try:
        return RenderResult(text=engine.format(diagnostic.payload))
    except Exception as exc:
        return RenderResult(
            text=diagnostic.title or RENDER_PLACEHOLDER,
            fallback=True,
            error=f"{type(exc).__name__}: {exc}",
        )
