from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Sequence

from .constants import DEFAULT_INCLUDE
from .errors import ConfigError, FilenameError
from .logging import GateLogger
from .models import ChangedFile, IdentifierParse


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """
    Translate a glob into an anchored regex.

    `*`, `?` and `[...]` never cross a `/`; `**` does, and a `**/` segment
    also matches zero directories.
    """
    i, n = 0, len(pattern)
    out: List[str] = []
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                j = i + 2
                at_segment_start = i == 0 or pattern[i - 1] == "/"
                if at_segment_start and j < n and pattern[j] == "/":
                    out.append("(?:[^/]*/)*")
                    i = j + 1
                else:
                    out.append(".*")
                    i = j
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(c))
            else:
                stuff = pattern[i + 1 : j].replace("\\", "\\\\")
                if stuff.startswith("!"):
                    stuff = "^" + stuff[1:]
                elif stuff.startswith("^"):
                    stuff = "\\" + stuff
                out.append(f"[{stuff}]")
                i = j
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z")


def _normalize(path: str) -> str:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    normalized = _normalize(path)
    return any(glob_to_regex(_normalize(pat)).match(normalized) for pat in patterns)


def _numeric(candidate: str, error: str) -> IdentifierParse:
    if candidate and candidate.isascii() and candidate.isdigit():
        return IdentifierParse(number=int(candidate))
    return IdentifierParse(error=error)


def parse_identifier(path: str) -> IdentifierParse:
    """
    Find the proposal number in a path.

    Conventions, in order: `eip-1234.md`, `01234/index.md`, `01234.md`.
    """
    pure = PurePosixPath(_normalize(path))
    name = pure.name
    stem = pure.stem

    if "-" in stem:
        parts = [part for part in stem.split("-") if part]
        candidate = parts[-1] if parts else ""
        return _numeric(candidate, f"expected a number after the last dash in `{name}`")

    if name == "index.md":
        parent = pure.parent.name
        return _numeric(parent, f"expected a numeric directory name, got `{parent}`")

    return _numeric(stem, f"expected a numeric file name, got `{name}`")


def extract_identifier(path: str) -> int:
    parsed = parse_identifier(path)
    if parsed.number is None:
        raise FilenameError(path, parsed.error or "")
    return parsed.number


_UNCHECKED_ENTRY = re.compile(r"(?:[A-Za-z]+-)?([0-9]+)(?:\.md)?")


def parse_unchecked(text: str) -> frozenset[int]:
    """Comma-separated proposal numbers; legacy `eip-N.md` names are reduced to N."""
    numbers = set()
    for item in (text or "").split(","):
        entry = item.strip()
        if not entry:
            continue
        match = _UNCHECKED_ENTRY.fullmatch(entry)
        if match is None:
            raise ConfigError(
                f"invalid `unchecked` entry `{entry}`: expected a number or a name like `eip-1234.md`"
            )
        numbers.add(int(match.group(1)))
    return frozenset(numbers)


def parse_include(text: str) -> tuple[str, ...]:
    patterns = tuple(line.strip() for line in (text or "").splitlines() if line.strip())
    return patterns or (DEFAULT_INCLUDE,)


def select_files(
    files: Sequence[ChangedFile],
    include: Sequence[str],
    unchecked: frozenset[int],
    working_directory: str = "",
    logger: Optional[GateLogger] = None,
) -> List[str]:
    """Pick the proposal files to lint, keeping API order."""
    selected: List[str] = []
    seen = set()
    for entry in files:
        path = entry.path
        if entry.status == "removed":
            continue
        if not matches_any(path, include):
            continue
        number = extract_identifier(path)
        if number in unchecked:
            if logger:
                logger.info("file_unchecked", path=path, number=number)
            continue
        if path in seen:
            continue
        seen.add(path)
        selected.append(str(Path(working_directory) / path) if working_directory else path)
    return selected
