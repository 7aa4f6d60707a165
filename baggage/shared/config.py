"""
Configuration Management

Pydantic-settings based configuration for the baggage report relay.
Variable names follow the deployed function's environment (no prefix).
"""

import os
from collections.abc import Mapping, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# TO_* variables that are not station codes
RESERVED_RECIPIENT_VARS = frozenset({"TO_PRIMARY", "TO_DEFAULT_STATION"})


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Variables are case-insensitive. Example: TO_PRIMARY=baggage@example.com
    Per-station recipients (TO_NAS, TO_FPO, ...) are collected separately by
    get_settings() into ``station_recipients``, from the same env files and
    the process environment.
    """

    model_config = SettingsConfigDict(
        env_file=[".env.local", ".env"],  # Later files take priority
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Email provider
    email_provider: Literal["sendgrid", "ses"] = Field(
        default="sendgrid",
        description="Transactional email provider adapter",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key",
    )

    # Sender identity
    from_address: str | None = Field(
        default=None,
        description="From address for report notifications",
    )
    from_name: str = Field(
        default="Bahamasair Baggage Reports",
        description="Display name for report notifications",
    )

    # Routing
    to_primary: str | None = Field(
        default=None,
        description="Recipient included on every report",
    )
    to_default_station: str | None = Field(
        default=None,
        description="Station recipient when the station has no override",
    )
    station_recipients: dict[str, str] = Field(
        default_factory=dict,
        description="Station code to recipient address",
    )

    # SES Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region for SES",
    )
    ses_endpoint_url: str | None = Field(
        default=None,
        description="SES endpoint URL (for local development)",
    )
    ses_configuration_set: str | None = Field(
        default=None,
        description="SES configuration set for tracking",
    )

    # Attachment limits
    max_attachments: int = Field(
        default=5,
        ge=0,
        description="Maximum number of uploads attached to a report",
    )
    max_attachment_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum size of a single upload",
    )

    # Application Configuration
    echo_received_keys: bool = Field(
        default=False,
        description="Append the received field keys to missing-field errors",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @property
    def ses_config(self) -> dict:
        """SES client configuration."""
        config = {"region_name": self.aws_region}
        if self.ses_endpoint_url and self.ses_endpoint_url != "mock":
            config["endpoint_url"] = self.ses_endpoint_url
        return config

    def station_recipient(self, station_code: str) -> str | None:
        """Recipient for a station, falling back to the default station inbox."""
        return self.station_recipients.get(station_code) or self.to_default_station or None

    def recipients_for(self, station_code: str) -> list[str]:
        """
        Resolve the destination list for a station.

        The primary inbox is always first. Blank and repeated addresses are
        dropped so providers that reject duplicate recipients accept the list.
        """
        recipients: list[str] = []
        for address in (self.to_primary, self.station_recipient(station_code)):
            if address and address not in recipients:
                recipients.append(address)
        return recipients


def collect_station_recipients(environ: Mapping[str, str]) -> dict[str, str]:
    """
    Build the station routing table from TO_<STATIONCODE> variables.

    Args:
        environ: Environment mapping (usually os.environ)

    Returns:
        Upper-cased station code to recipient address
    """
    routes: dict[str, str] = {}
    for name, value in environ.items():
        key = name.upper()
        if not key.startswith("TO_") or key in RESERVED_RECIPIENT_VARS:
            continue
        code = key[len("TO_"):]
        if code and value.strip():
            routes[code] = value.strip()
    return routes


def read_recipient_environment(
    env_files: Sequence[str | Path],
    environ: Mapping[str, str],
) -> dict[str, str]:
    """
    Merge env files and the process environment the way Settings does.

    Later env files override earlier ones; the process environment overrides
    every file. Missing files are skipped.
    """
    merged: dict[str, str] = {}
    for env_file in env_files:
        path = Path(env_file)
        if path.is_file():
            merged.update(
                {k: v for k, v in dotenv_values(path, encoding="utf-8").items() if v is not None}
            )
    merged.update(environ)
    return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are loaded only once per container.
    Construct Settings(...) directly in tests to override.
    """
    environment = read_recipient_environment(Settings.model_config["env_file"], os.environ)
    return Settings(station_recipients=collect_station_recipients(environment))
