"""Configuration file loading."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sync_rules.core.discovery import DEFAULT_RULE_PATTERNS
from sync_rules.errors import ConfigNotFoundError, ConfigParseError
from sync_rules.utils.file import DEFAULT_MAX_FILE_SIZE

CONFIG_ENV_VAR = "SYNC_RULES_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/sync-rules/config.json")
DEFAULT_EXCLUDE_PATTERNS = ["memory-bank", "node_modules", ".git", "dist", "build"]


class SyncConfig(BaseModel):
    """Settings read from the JSON config file."""

    base_dir: Path = Field(Path("~/Developer"), validate_default=True, description="Directory holding the projects to discover")
    projects: list[Path] = Field(default_factory=list, description="Explicit project directories")
    rules: list[str] = Field(default_factory=lambda: list(DEFAULT_RULE_PATTERNS), description="Rule names or globs")
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS), description="Names or globs to skip")
    manifest_file: str | None = Field(None, description="Per-project manifest limiting additions")
    merge_tool: str = "git"
    editor: str = "code"
    max_file_size: int = Field(DEFAULT_MAX_FILE_SIZE, gt=0)
    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("base_dir", mode="after")
    @classmethod
    def _expand_base_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("projects", mode="after")
    @classmethod
    def _expand_projects(cls, value: list[Path]) -> list[Path]:
        return [path.expanduser() for path in value]

    @field_validator("rules", mode="after")
    @classmethod
    def _require_rules(cls, value: list[str]) -> list[str]:
        rules = [rule for rule in value if rule.strip()]
        if not rules:
            raise ValueError("at least one rule pattern is required")
        return rules


def resolve_config_path(path: str | Path | None = None) -> tuple[Path, bool]:
    """
    Work out which config file to read.

    Returns:
        tuple[Path, bool]: The path, and whether it was asked for explicitly
    """
    if path is not None:
        return Path(path).expanduser(), True
    load_dotenv()
    from_env = os.getenv(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def load_config(path: str | Path | None = None) -> SyncConfig:
    """
    Load the configuration.

    A missing default config yields the built-in defaults; a missing
    explicit one is an error.

    Raises:
        ConfigNotFoundError: If an explicitly requested file does not exist
        ConfigParseError: If the file is not valid JSON or fails validation
    """
    config_path, explicit = resolve_config_path(path)
    if not config_path.is_file():
        if explicit:
            raise ConfigNotFoundError(config_path)
        logger.debug(f"No config file at {config_path}; using defaults")
        return SyncConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise ConfigParseError(config_path, str(error)) from error
    if not isinstance(data, dict):
        raise ConfigParseError(config_path, "top-level value must be a JSON object")

    try:
        config = SyncConfig.model_validate(data)
    except ValidationError as error:
        raise ConfigParseError(config_path, str(error)) from error

    logger.debug(f"Loaded config from {config_path}")
    return config
