"""Configuration management - Pydantic model with YAML loading and CLI overrides."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from xambuild.errors import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".xambuild"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILE = Path("xambuild.yaml")

_EXAMPLE = (
    "Example:\n"
    "  tools_dir: ./tools\n"
    "  tool_paths:\n"
    "    vstool: /Applications/Visual Studio.app/Contents/MacOS/vstool\n"
    "  max_attempts: 3\n"
    "  log_level: INFO"
)


class ConfigError(ConfigurationError):
    """Raised when configuration is invalid or missing."""


class XamBuildConfig(BaseModel):
    """Build configuration with validation."""

    model_config = ConfigDict(extra="forbid")

    tools_dir: Path | None = None
    tool_paths: dict[str, Path] = Field(default_factory=dict)

    # Retry policy for component upload/submit
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.0, ge=0)
    continue_on_error: bool = False

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


def _format_validation(e: ValidationError) -> str:
    errors = []
    for err in e.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        msg = err["msg"]
        errors.append(f"  - {field}: {msg}")
    return "\n".join(errors)


def find_config_file(cwd: Path | None = None) -> Path | None:
    """Return the first existing default config file, project-local first."""
    project = (cwd or Path.cwd()) / PROJECT_CONFIG_FILE
    for candidate in (project, DEFAULT_CONFIG_FILE):
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path | None = None, cwd: Path | None = None) -> XamBuildConfig:
    """Load and validate config from a YAML file.

    Args:
        config_path: Explicit config file. Must exist when given.
        cwd: Directory searched for ``xambuild.yaml``. Defaults to the cwd.

    Returns:
        Validated XamBuildConfig; defaults when no config file is found.

    Raises:
        ConfigError: If an explicit file is missing, or a file is invalid.
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}\n\n{_EXAMPLE}")
    else:
        path = find_config_file(cwd)
        if path is None:
            return XamBuildConfig()

    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}:\n\n  {e}") from None

    if data is None:
        return XamBuildConfig()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid configuration in {path}\n\n"
            f"  Config file is not a valid YAML mapping.\n\n{_EXAMPLE}"
        )

    try:
        return XamBuildConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}\n\n{_format_validation(e)}") from None


def apply_cli_overrides(
    config: XamBuildConfig,
    tools_dir: Path | None = None,
    max_attempts: int | None = None,
    log_level: str | None = None,
    continue_on_error: bool | None = None,
) -> XamBuildConfig:
    """Apply CLI flag overrides to config. Returns a new XamBuildConfig instance.

    Override precedence: Defaults → YAML → CLI flags.
    """
    overrides = {}
    if tools_dir is not None:
        overrides["tools_dir"] = tools_dir
    if max_attempts is not None:
        overrides["max_attempts"] = max_attempts
    if log_level is not None:
        overrides["log_level"] = log_level
    if continue_on_error is not None:
        overrides["continue_on_error"] = continue_on_error

    if not overrides:
        return config

    try:
        return XamBuildConfig.model_validate(config.model_dump() | overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid CLI override:\n\n{_format_validation(e)}") from None
