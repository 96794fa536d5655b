"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_FILE = CONFIG_DIR / "settings.yaml"

DEFAULT_API_URL = "http://platform-api.newrelic.com/platform/v1/metrics"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


class ApiSettings(BaseModel):
    """Settings for the New Relic platform API."""
    model_config = ConfigDict(validate_assignment=True)

    url: str = DEFAULT_API_URL
    timeout_seconds: float = 30.0
    # Only switch off for throwaway test environments
    verify_tls: bool = True


class SourceSettings(BaseModel):
    """Settings for the site that exposes the statistics."""
    model_config = ConfigDict(validate_assignment=True)

    stats_path: str = "new-relic-rpm-plugin"
    request_timeout: float = 30.0
    verify_tls: bool = True


class PluginSettings(BaseModel):
    """Identity under which the site's metrics are reported."""
    model_config = ConfigDict(validate_assignment=True)

    metric_guid: str = "org.Drupal"
    metric_duration: int = Field(default=300, gt=0, description="Seconds")
    default_site_name: str = "Unknown website"


class Settings(BaseModel):
    """Top-level application settings."""
    api: ApiSettings = Field(default_factory=ApiSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    plugin: PluginSettings = Field(default_factory=PluginSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables override whatever the file provides.
        """
        settings_path = path or SETTINGS_FILE
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        settings.apply_env_overrides()
        return settings

    def apply_env_overrides(self) -> None:
        """Load overrides from environment."""
        if url := os.getenv("NEW_RELIC_API_URL"):
            self.api.url = url
        if timeout := os.getenv("NEW_RELIC_TIMEOUT"):
            self.api.timeout_seconds = float(timeout)
        if verify := os.getenv("NEW_RELIC_VERIFY_TLS"):
            self.api.verify_tls = _env_flag(verify)
        if guid := os.getenv("NEW_RELIC_METRIC_GUID"):
            self.plugin.metric_guid = guid
        if duration := os.getenv("NEW_RELIC_METRIC_DURATION"):
            self.plugin.metric_duration = int(duration)
        if stats_path := os.getenv("SITE_STATS_PATH"):
            self.source.stats_path = stats_path
        if timeout := os.getenv("SITE_REQUEST_TIMEOUT"):
            self.source.request_timeout = float(timeout)
        if verify := os.getenv("SITE_VERIFY_TLS"):
            self.source.verify_tls = _env_flag(verify)
