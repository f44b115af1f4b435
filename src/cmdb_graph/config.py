"""Instance configuration.

Uses Pydantic Settings for environment-based configuration. Values are
read from ``SN_*`` environment variables or a local ``.env`` file.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_instance_url(instance: str) -> str:
    """Strip trailing slashes and default the scheme to https."""
    url = instance.strip().rstrip("/")
    if not url.startswith("http"):
        url = f"https://{url}"
    return url


class InstanceSettings(BaseSettings):
    """Connection settings for a ServiceNow instance.

    Attributes:
        instance: Instance URL (e.g. https://acme.service-now.com).
        user: Basic-auth user name.
        password: Basic-auth password.
        timeout: Per-request timeout in seconds.
        log_level: Level for the CLI's stderr logging.
    """

    model_config = SettingsConfigDict(
        env_prefix="SN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    instance: str
    user: str
    password: str
    timeout: float = 30.0
    log_level: str = "WARNING"

    @field_validator("instance")
    @classmethod
    def _normalize_instance(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("instance cannot be empty")
        return normalize_instance_url(value)


__all__ = ["InstanceSettings", "normalize_instance_url"]
