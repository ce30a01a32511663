from __future__ import annotations

from typing import Optional

from .constants import ExitCode


class GateError(Exception):
    """Base exception for all gate errors."""

    exit_code: ExitCode = ExitCode.FAILURE


class ConfigError(GateError):
    """Inputs or the options file are unusable."""


class FilenameError(ConfigError):
    """A proposal path carries no numeric identifier."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"cannot extract a proposal number from `{path}`{detail}")


class TransportError(GateError):
    """GitHub API call did not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(TransportError):
    """GitHub rate limit was not lifted within the retry budget."""

    def __init__(self, message: str, status_code: Optional[int] = None, secondary: bool = False) -> None:
        self.secondary = secondary
        super().__init__(message, status_code=status_code)


class LintEngineError(GateError):
    """The lint engine could not process the inputs at all."""
