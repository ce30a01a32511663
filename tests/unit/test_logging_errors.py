from __future__ import annotations

import json

import pytest

from eipgate.constants import ExitCode
from eipgate.errors import ConfigError, FilenameError, LintEngineError, RateLimitError, TransportError
from eipgate.logging import GateLogger


def test_logger_emits_json(capsys) -> None:
    logger = GateLogger("run-1")
    logger.info("hello", detail="world")
    captured = capsys.readouterr()

    payload = json.loads(captured.err.strip().splitlines()[0])
    assert payload["run_id"] == "run-1"
    assert payload["message"] == "hello"
    assert payload["detail"] == "world"


def test_logger_emits_warning_annotation(capsys) -> None:
    logger = GateLogger("run-2")
    logger.warning("slow\ndown")
    captured = capsys.readouterr()
    assert "::warning::slow%0Adown" in captured.err


def test_logger_can_skip_workflow_annotation(capsys) -> None:
    logger = GateLogger("run-5")
    logger.warning("quota exhausted", annotate=False, retry_count=1)
    captured = capsys.readouterr()
    payload = json.loads(captured.err.strip())
    assert payload["level"] == "warning"
    assert payload["retry_count"] == 1
    assert "annotate" not in payload
    assert "::warning::" not in captured.err


def test_logger_redacts_sensitive_keys(capsys) -> None:
    logger = GateLogger("run-3")
    logger.info("auth", token="ghs_secret")
    captured = capsys.readouterr()
    payload = json.loads(captured.err.strip().splitlines()[0])
    assert payload["token"] == "***"


def test_stage_logs_duration_and_reraises(capsys) -> None:
    logger = GateLogger("run-4")
    with pytest.raises(ValueError):
        with logger.stage("lint"):
            raise ValueError("boom")
    err = capsys.readouterr().err
    records = [json.loads(line) for line in err.splitlines() if line.startswith("{")]
    assert [r["message"] for r in records] == ["stage_start", "stage_error", "stage_end"]
    assert records[-1]["status"] == "error"
    assert "::error::" not in err


def test_error_hierarchy_and_exit_codes() -> None:
    assert issubclass(FilenameError, ConfigError)
    assert issubclass(RateLimitError, TransportError)
    for exc in (ConfigError("x"), FilenameError("a.md"), TransportError("x", 500), LintEngineError("x")):
        assert exc.exit_code == ExitCode.FAILURE
