from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ChangedFile:
    path: str
    status: str

    @classmethod
    def from_api(cls, entry: Dict[str, Any]) -> "ChangedFile":
        return cls(path=str(entry.get("filename") or ""), status=str(entry.get("status") or ""))


class Severity(str, Enum):
    """Diagnostic severities emitted by the lint engine."""

    HELP = "Help"
    NOTE = "Note"
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    UNRECOGNIZED = "Unrecognized"

    @classmethod
    def parse(cls, raw: Any) -> "Severity":
        """Map an engine severity onto the closed set; anything unknown is UNRECOGNIZED."""
        for member in cls:
            if member is not cls.UNRECOGNIZED and member.value == raw:
                return member
        return cls.UNRECOGNIZED


class AnnotationLevel(str, Enum):
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class SeverityConfig:
    deny: frozenset[str] = frozenset()
    warn: frozenset[str] = frozenset()
    allow: frozenset[str] = frozenset()
    default_lints: Optional[Any] = None
    default_modifiers: Optional[Any] = None
    options_path: Optional[str] = None


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    raw_severity: Optional[str]
    title: Optional[str]
    origin_file: Optional[str] = None
    start_line: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Diagnostic":
        """Build from the engine's JSON snippet (title + slices)."""
        title = payload.get("title") or {}
        if not isinstance(title, dict):
            title = {}
        raw_severity = title.get("annotation_type")
        label = title.get("label")

        origin_file: Optional[str] = None
        start_line: Optional[int] = None
        slices = payload.get("slices") or []
        if isinstance(slices, list) and slices and isinstance(slices[0], dict):
            first = slices[0]
            origin = first.get("origin")
            origin_file = str(origin) if origin is not None else None
            line = first.get("line_start")
            start_line = line if isinstance(line, int) and not isinstance(line, bool) else None

        return cls(
            severity=Severity.parse(raw_severity),
            raw_severity=raw_severity if isinstance(raw_severity, str) else None,
            title=label if isinstance(label, str) else None,
            origin_file=origin_file,
            start_line=start_line,
            payload=payload,
        )


@dataclass(frozen=True)
class Annotation:
    level: AnnotationLevel
    message: str
    title: Optional[str] = None
    file: Optional[str] = None
    start_line: Optional[int] = None


@dataclass
class RunVerdict:
    has_errors: bool = False

    def record(self, level: AnnotationLevel) -> None:
        if level == AnnotationLevel.ERROR:
            self.has_errors = True


@dataclass
class RateLimitState:
    retry_count: int = 0


@dataclass(frozen=True)
class IdentifierParse:
    number: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.number is not None


@dataclass(frozen=True)
class RenderResult:
    text: str
    fallback: bool = False
    error: Optional[str] = None


class GateStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class GateResult:
    status: GateStatus
    reason: str
    verdict: RunVerdict = field(default_factory=RunVerdict)
    files: Tuple[str, ...] = ()
    annotations: List[Annotation] = field(default_factory=list)
    comment_url: Optional[str] = None

    def count(self, level: AnnotationLevel) -> int:
        return sum(1 for a in self.annotations if a.level == level)
