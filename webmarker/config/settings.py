from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    msg = f"{field_name.replace('_', ' ')} must be a boolean"
    raise ValueError(msg)


class BackendConfig(BaseModel):
    """Persistence backend connection settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("BACKEND_URL", "WEBMARKER_BACKEND_URL"),
    )
    timeout_sec: float = Field(default=15.0, validation_alias="BACKEND_TIMEOUT_SEC")
    max_retries: int = Field(default=3, validation_alias="BACKEND_MAX_RETRIES")
    retry_base_delay: float = Field(default=0.5, validation_alias="BACKEND_RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=10.0, validation_alias="BACKEND_RETRY_MAX_DELAY")

    @field_validator("api_url", mode="before")
    @classmethod
    def _validate_api_url(cls, value: Any) -> str:
        url = str(value or "http://localhost:3000").strip()
        if not url.startswith(("http://", "https://")):
            msg = "BACKEND_URL must start with http:// or https://"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("timeout_sec", "retry_base_delay", "retry_max_delay", mode="before")
    @classmethod
    def _parse_positive_float(cls, value: Any, info: ValidationInfo) -> float:
        if value in (None, ""):
            return float(cls.model_fields[info.field_name].default)
        try:
            parsed = float(str(value))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a number"
            raise ValueError(msg) from exc
        if parsed < 0:
            msg = f"{info.field_name.replace('_', ' ')} must not be negative"
            raise ValueError(msg)
        return parsed

    @field_validator("max_retries", mode="before")
    @classmethod
    def _parse_max_retries(cls, value: Any) -> int:
        if value in (None, ""):
            return 3
        try:
            parsed = int(str(value))
        except ValueError as exc:
            msg = "Max retries must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 0 or parsed > 10:
            msg = "Max retries must be between 0 and 10"
            raise ValueError(msg)
        return parsed


class SyncConfig(BaseModel):
    """Behaviour of optimistic updates and tag propagation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rollback_on_failure: bool = Field(default=False, validation_alias="ROLLBACK_ON_FAILURE")
    propagate_tags: bool = Field(default=True, validation_alias="PROPAGATE_TAGS")

    @field_validator("rollback_on_failure", "propagate_tags", mode="before")
    @classmethod
    def _parse_flags(cls, value: Any, info: ValidationInfo) -> bool:
        if value is None:
            return bool(cls.model_fields[info.field_name].default)
        return _parse_bool(value, info.field_name)


class RuntimeConfig(BaseModel):
    """Process-wide logging. ``log_json`` selects the loguru JSON sink over the stdlib formatter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        level = str(value or "INFO").upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in valid_levels:
            msg = f"Invalid log level: {level}. Must be one of {sorted(valid_levels)}"
            raise ValueError(msg)
        return level

    @field_validator("log_json", mode="before")
    @classmethod
    def _parse_log_json(cls, value: Any) -> bool:
        if value is None:
            return True
        return _parse_bool(value, "log_json")

    @field_validator("log_file", mode="before")
    @classmethod
    def _normalize_log_file(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        return str(value).strip()


@dataclass(frozen=True)
class AppConfig:
    backend: BackendConfig
    sync: SyncConfig
    runtime: RuntimeConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Nested models are populated by matching the validation_alias of each
    of their fields against the environment.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    backend: BackendConfig = Field(default_factory=BackendConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: Any) -> Any:
        """Merge flat environment variables into the nested sections.

        Constructor arguments take precedence over the environment.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**os.environ, **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if field_name in result and isinstance(result[field_name], dict):
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    def as_app_config(self) -> AppConfig:
        return AppConfig(backend=self.backend, sync=self.sync, runtime=self.runtime)


def load_config(**overrides: Any) -> AppConfig:
    """Load configuration from the environment and an optional ``.env`` file.

    Args:
        **overrides: Section dicts (``backend={...}``) that win over the environment.

    Returns:
        Immutable AppConfig instance.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    config = settings.as_app_config()
    logger.debug(
        "config_loaded",
        extra={
            "backend_url": config.backend.api_url,
            "rollback_on_failure": config.sync.rollback_on_failure,
        },
    )
    return config
