from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr, conint, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_ENGINE, DEFAULT_INCLUDE
from .selection import parse_include


def _input_alias(name: str) -> AliasChoices:
    # The runner keeps hyphens in input names: `working-directory` -> INPUT_WORKING-DIRECTORY.
    upper = name.upper()
    return AliasChoices(f"INPUT_{upper}", f"INPUT_{upper.replace('-', '_')}")


class GateConfig(BaseSettings):
    """Configuration loaded from GitHub Actions inputs."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    token: SecretStr = Field(default="", description="GitHub token used for API calls")
    working_directory: str = Field(
        default="",
        validation_alias=_input_alias("working-directory"),
        description="Directory the proposal paths are relative to",
    )
    include: str = Field(
        default=DEFAULT_INCLUDE,
        description="Newline-separated glob patterns selecting proposal files",
    )
    unchecked: str = Field(
        default="",
        description="Comma-separated proposal numbers (or legacy eip-N.md names) to skip",
    )
    deny_checks: str = Field(default="", validation_alias=_input_alias("deny-checks"))
    warn_checks: str = Field(default="", validation_alias=_input_alias("warn-checks"))
    allow_checks: str = Field(default="", validation_alias=_input_alias("allow-checks"))
    options_file: str = Field(
        default="",
        validation_alias=_input_alias("options-file"),
        description="Optional TOML file with `lints` and/or `modifiers` tables",
    )

    eipw_path: str = Field(
        default=DEFAULT_ENGINE,
        validation_alias=_input_alias("eipw-path"),
        description="Lint engine executable",
    )
    lint_timeout: conint(ge=1) = Field(
        default=300,
        validation_alias=_input_alias("lint-timeout"),
        description="Seconds before the lint engine is killed",
    )

    @field_validator("working_directory", "options_file", "eipw_path", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("eipw_path")
    @classmethod
    def _engine_not_blank(cls, value: str) -> str:
        return value or DEFAULT_ENGINE

    def include_patterns(self) -> tuple[str, ...]:
        return parse_include(self.include)
