from __future__ import annotations

from enum import Enum


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    FAILURE = 1


PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})

DEFAULT_INCLUDE = "EIPS/**"
DEFAULT_ENGINE = "eipw"

RENDER_PLACEHOLDER = "<failed to render diagnostic, this is a bug in eipw>"
FAILURE_REASON = "validation found errors :("
NO_FILES_NOTICE = "no files to check"
WRONG_EVENT_WARNING = "eipgate should only be configured to run on pull requests"


class Limits:
    """Shared hard limits."""

    PER_PAGE = 100
    MAX_PRIMARY_RETRIES = 2
    DEFAULT_RETRY_AFTER_SECONDS = 60
    HTTP_TIMEOUT_SECONDS = 15.0
