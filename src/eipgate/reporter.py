from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

from .lint import LintEngine, render_diagnostic
from .logging import GateLogger
from .models import Annotation, AnnotationLevel, Diagnostic, RunVerdict, Severity

SEVERITY_TO_LEVEL = {
    Severity.HELP: AnnotationLevel.NOTICE,
    Severity.NOTE: AnnotationLevel.NOTICE,
    Severity.INFO: AnnotationLevel.NOTICE,
    Severity.WARNING: AnnotationLevel.WARNING,
    Severity.ERROR: AnnotationLevel.ERROR,
    Severity.UNRECOGNIZED: AnnotationLevel.ERROR,
}


class AnnotationSink(Protocol):
    def emit(self, annotation: Annotation) -> None:
        ...


def annotation_level(severity: Severity) -> AnnotationLevel:
    return SEVERITY_TO_LEVEL[severity]


@dataclass
class ReportResult:
    verdict: RunVerdict = field(default_factory=RunVerdict)
    annotations: List[Annotation] = field(default_factory=list)


class DiagnosticReporter:
    """Turns diagnostics into annotations, one each, in order."""

    def __init__(self, engine: LintEngine, sink: AnnotationSink, logger: Optional[GateLogger] = None):
        self.engine = engine
        self.sink = sink
        self.logger = logger

    def annotate(self, diagnostic: Diagnostic) -> Annotation:
        rendered = render_diagnostic(self.engine, diagnostic)
        if rendered.fallback and self.logger:
            self.logger.warning(
                "diagnostic_render_failed", annotate=False, title=diagnostic.title, error=rendered.error
            )
        return Annotation(
            level=annotation_level(diagnostic.severity),
            message=rendered.text,
            title=diagnostic.title,
            file=diagnostic.origin_file,
            start_line=diagnostic.start_line,
        )

    def report(self, diagnostics: Iterable[Diagnostic]) -> ReportResult:
        result = ReportResult()
        for diagnostic in diagnostics:
            if diagnostic.severity is Severity.UNRECOGNIZED and self.logger:
                self.logger.warning("unrecognized_severity", annotate=False, severity=diagnostic.raw_severity)
            annotation = self.annotate(diagnostic)
            self.sink.emit(annotation)
            result.annotations.append(annotation)
            result.verdict.record(annotation.level)
        return result
