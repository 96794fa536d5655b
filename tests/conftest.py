"""Shared test fixtures for the site metrics plugin."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings
from src.newrelic_plugin.models import AgentMetric, SimpleMetric
from src.newrelic_plugin.request import MetricRequest


_ENV_OVERRIDES = (
    "NEW_RELIC_API_URL",
    "NEW_RELIC_TIMEOUT",
    "NEW_RELIC_VERIFY_TLS",
    "NEW_RELIC_METRIC_GUID",
    "NEW_RELIC_METRIC_DURATION",
    "SITE_STATS_PATH",
    "SITE_REQUEST_TIMEOUT",
    "SITE_VERIFY_TLS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's .env or shell from leaking into settings."""
    for name in _ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Default settings, ignoring any config/settings.yaml on disk."""
    return Settings.load(tmp_path / "settings.yaml")


@pytest.fixture
def sample_stats() -> dict:
    """Statistics document as the site returns it."""
    return {
        "site_name": "Example Site",
        "total_users": 1337,
        "total_nodes": 512,
        "total_comments": 42,
    }


@pytest.fixture
def simple_metric() -> SimpleMetric:
    return SimpleMetric(name="total_users", units="users", value=1337)


@pytest.fixture
def agent_metric() -> AgentMetric:
    return AgentMetric(name="Example Site", guid="org.Drupal", duration=300, value=7)


@pytest.fixture
def ready_request(simple_metric) -> MetricRequest:
    """A request with one complete simple metric, ready to send."""
    request = MetricRequest(license_key="test-license", host="web1.example.com")
    request.metric_name = "Example Site"
    request.metric_guid = "org.Drupal"
    request.metric_duration = 300
    request.add_component(simple_metric)
    return request
