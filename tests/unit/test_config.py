from __future__ import annotations

import pytest
from pydantic import ValidationError

from eipgate.config import GateConfig


def test_config_loads_defaults_and_masks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_TOKEN", "ghs_test_dummy")
    cfg = GateConfig()

    assert cfg.include_patterns() == ("EIPS/**",)
    assert cfg.working_directory == ""
    assert cfg.eipw_path == "eipw"
    assert cfg.lint_timeout == 300
    assert "ghs_test_dummy" not in repr(cfg)
    assert cfg.token.get_secret_value() == "ghs_test_dummy"


def test_config_reads_hyphenated_inputs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_WORKING-DIRECTORY", " checkout ")
    monkeypatch.setenv("INPUT_DENY-CHECKS", "markdown-rel-links")
    monkeypatch.setenv("INPUT_OPTIONS-FILE", "config/eipw.toml")
    monkeypatch.setenv("INPUT_INCLUDE", "EIPS/**\nERCS/**")
    monkeypatch.setenv("INPUT_UNCHECKED", "1, 20")
    cfg = GateConfig()

    assert cfg.working_directory == "checkout"
    assert cfg.deny_checks == "markdown-rel-links"
    assert cfg.options_file == "config/eipw.toml"
    assert cfg.include_patterns() == ("EIPS/**", "ERCS/**")
    assert cfg.unchecked == "1, 20"


def test_config_reads_underscored_inputs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_WARN_CHECKS", "preamble-order")
    monkeypatch.setenv("INPUT_LINT_TIMEOUT", "45")
    cfg = GateConfig()

    assert cfg.warn_checks == "preamble-order"
    assert cfg.lint_timeout == 45


def test_invalid_timeout_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_LINT-TIMEOUT", "0")
    with pytest.raises(ValidationError):
        GateConfig()


def test_config_accepts_field_names() -> None:
    cfg = GateConfig(token="t", allow_checks="a,b", eipw_path=" ")
    assert cfg.allow_checks == "a,b"
    assert cfg.eipw_path == "eipw"


def test_config_is_frozen() -> None:
    cfg = GateConfig(token="t")
    with pytest.raises((TypeError, ValidationError)):
        cfg.include = "ERCS/**"
