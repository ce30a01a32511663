from __future__ import annotations

import tomllib
from pathlib import Path
from typing import List, Optional

from .errors import ConfigError
from .models import SeverityConfig


def split_names(text: Optional[str]) -> List[str]:
    return [item.strip() for item in (text or "").split(",") if item.strip()]


def resolve_severity_config(
    deny: str = "",
    warn: str = "",
    allow: str = "",
    options_file: Optional[str] = None,
) -> SeverityConfig:
    """
    Merge the check lists and the optional options file into one config.

    An options file must define `lints`, `modifiers`, or both.
    """
    default_lints = None
    default_modifiers = None
    options_path = None

    if options_file:
        path = Path(options_file)
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"options file `{options_file}` not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"options file `{options_file}` unreadable: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"options file `{options_file}` is not valid TOML: {exc}") from exc

        if "lints" not in data and "modifiers" not in data:
            raise ConfigError(f"options file `{options_file}` defines neither `lints` nor `modifiers`")
        default_lints = data.get("lints")
        default_modifiers = data.get("modifiers")
        options_path = str(path)

    return SeverityConfig(
        deny=frozenset(split_names(deny)),
        warn=frozenset(split_names(warn)),
        allow=frozenset(split_names(allow)),
        default_lints=default_lints,
        default_modifiers=default_modifiers,
        options_path=options_path,
    )
