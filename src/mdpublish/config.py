"""Application configuration: settings schema and md-publish.yml loader"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from mdpublish.errors import ConfigError


CONFIG_FILES = ("md-publish.yml", "md-publish.yaml")
ENV_PREFIX = "MDPUB_"


class NotionSettings(BaseModel):
    token_env:   str = "NOTION_TOKEN"
    api_version: str = "2022-06-28"
    base_url:    str = "https://api.notion.com"
    timeout:     float = Field(default=30.0, gt=0)


class Target(BaseModel):
    """A source directory published under one remote parent page."""
    name:           str = Field(..., min_length=1)
    src:            str = Field(..., min_length=1)
    parent_page_id: str = Field(..., min_length=1)


class Settings(BaseModel):
    version:          int = 1
    notion:           NotionSettings = Field(default_factory=NotionSettings)
    targets:          list[Target] = Field(..., min_length=1, description="At least one publish target")
    concurrency:      int = Field(default=2, ge=1, description="Max simultaneous remote calls")
    max_retries:      int = Field(default=5, ge=1, description="Attempts per call on rate limit")
    retry_base_delay: float = Field(default=1.0, ge=0, description="First backoff delay in seconds")
    cache_dir:        str = Field(default=".md-publish-cache", description="Cache directory, relative to the config file")
    log_level:        Literal["debug", "info", "warning", "error"] = "info"

    @field_validator("version")
    @classmethod
    def _supported_version(cls, v: int) -> int:
        if v != 1:
            raise ValueError(f"unsupported config version: {v}")
        return v


_SCALAR_FIELDS = ("concurrency", "max_retries", "retry_base_delay", "cache_dir", "log_level")


def find_config_file(path: Path | None = None) -> Path:
    """Return the explicit path or the first default config file in the cwd."""
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path
    for name in CONFIG_FILES:
        if Path(name).exists():
            return Path(name)
    raise ConfigError(f"Config file not found: {' or '.join(CONFIG_FILES)}")


def load_config(path: Path | None = None, overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from the YAML file, then MDPUB_<FIELD> env vars, then non-None CLI overrides."""
    config_file = find_config_file(path)
    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid {config_file}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {config_file}: expected a mapping, got {type(data).__name__}")

    for name in _SCALAR_FIELDS:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {config_file}: {e}") from e


def get_notion_token(settings: Settings) -> str:
    """Read the API token from the environment variable named in settings."""
    token = os.getenv(settings.notion.token_env)
    if not token:
        raise ConfigError(f"Environment variable {settings.notion.token_env} is not set")
    return token


def resolve_target_src(target: Target, config_dir: Path) -> Path:
    return (config_dir / target.src).resolve()
