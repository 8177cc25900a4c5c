"""Settings loaded from environment / .env file / TOML config file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "jenkinsfile-ls" / "config.toml"

# Variable names shared with the Jenkins CLI, first match wins.
JENKINS_ENV_VARS: dict[str, tuple[str, ...]] = {
    "jenkins_url": ("JENKINS_URL", "JENKINS_HOST"),
    "username": ("JENKINS_USER_ID", "JENKINS_USERNAME"),
    "api_token": ("JENKINS_API_TOKEN", "JENKINS_TOKEN", "JENKINS_PASSWORD"),
    "insecure": ("JENKINS_INSECURE",),
}


class ConfigError(Exception):
    """Raised when no usable Jenkins configuration could be assembled."""


class JenkinsEnvSettingsSource(PydanticBaseSettingsSource):
    """Reads the unprefixed ``JENKINS_*`` variables listed in :data:`JENKINS_ENV_VARS`."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        for var in JENKINS_ENV_VARS.get(field_name, ()):
            value = os.environ.get(var)
            if value is not None:
                return value, var, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, _, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[field_name] = value
        return data


class Settings(BaseSettings):
    """Configuration for the Jenkinsfile language server.

    Precedence, highest first: explicit keyword arguments, ``JENKINS_*``
    variables (same names as the Jenkins CLI), ``JENKINSFILE_LS_*``
    variables, a ``.env`` file in the working directory, then the TOML
    config file.
    """

    model_config = SettingsConfigDict(
        env_prefix="JENKINSFILE_LS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Jenkins connection
    jenkins_url: str
    username: str
    api_token: SecretStr
    insecure: bool = False  # skip TLS certificate verification

    # HTTP behaviour
    request_timeout_seconds: float = 30.0
    crumb_ttl_seconds: float = 60.0  # 0 disables crumb reuse

    # Shared
    log_level: str = "INFO"

    @field_validator("jenkins_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("jenkins_url cannot be empty")
        if not value.startswith(("http://", "https://")):
            raise ValueError("jenkins_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username cannot be empty")
        return value

    @field_validator("api_token")
    @classmethod
    def _check_token(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("api_token cannot be empty")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            JenkinsEnvSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )


def load_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """Build :class:`Settings`, reading *config_path* (or the default file).

    Raises :class:`ConfigError` with a readable summary when required
    values are missing or invalid.
    """
    if config_path is not None and not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    toml_file = config_path if config_path is not None else DEFAULT_CONFIG_PATH

    class _FileSettings(Settings):
        model_config = SettingsConfigDict(toml_file=toml_file)

    try:
        return _FileSettings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
