"""Collect site statistics and turn them into a metric request.

The site exposes its statistics as a flat JSON object at
``{base_url}/new-relic-rpm-plugin/{key}``, for example::

    {"site_name": "Example", "total_users": 1337, "total_comments": 42}

A measurement missing from that object has been disabled on the site and is
not reported.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import requests

from src.common.config import Settings
from src.common.http_client import HTTPClient

from .errors import TransportError
from .models import (
    DEFAULT_MEASUREMENTS,
    MAX_METRIC_NAME_LENGTH,
    Measurement,
    SimpleMetric,
)
from .request import MetricRequest

logger = logging.getLogger(__name__)


def build_stats_url(base_url: str, key: str, stats_path: str = "new-relic-rpm-plugin") -> str:
    """URL of the site's statistics endpoint."""
    return f"{base_url.rstrip('/')}/{stats_path.strip('/')}/{key}"


def fetch_site_stats(
    client: HTTPClient,
    base_url: str,
    key: str,
    stats_path: str = "new-relic-rpm-plugin",
) -> dict[str, Any]:
    """Fetch the statistics document from the site.

    Raises:
        TransportError: The site could not be reached, answered with an
            error status, or did not return a JSON object.
    """
    url = build_stats_url(base_url, key, stats_path)
    try:
        data = client.get_json(url)
    except requests.RequestException as exc:
        raise TransportError(f"Could not fetch site statistics from {url}: {exc}") from exc

    if not isinstance(data, dict):
        raise TransportError(
            f"Expected a JSON object from {url}, got {type(data).__name__}"
        )
    logger.info("Fetched %d statistics keys from %s", len(data), url)
    return data


def build_components(
    stats: Mapping[str, Any],
    measurements: Mapping[str, Measurement] = DEFAULT_MEASUREMENTS,
) -> list[SimpleMetric]:
    """Map the site's statistics onto simple metrics, in table order."""
    components: list[SimpleMetric] = []

    for machine_name, measurement in measurements.items():
        if machine_name not in stats:
            logger.debug("Measurement %s is disabled on the site", machine_name)
            continue

        raw = stats[machine_name]
        try:
            if isinstance(raw, bool):
                raise TypeError("boolean")
            value = int(raw)
        except (TypeError, ValueError):
            logger.warning("Skipping %s: non-numeric value %r", machine_name, raw)
            continue

        # The API only accepts non-zero counts
        if value == 0:
            logger.info("Skipping %s: value is zero", machine_name)
            continue

        components.append(
            SimpleMetric(name=machine_name, units=measurement.units, value=value)
        )

    return components


def build_request(
    components: Iterable[SimpleMetric],
    *,
    license_key: str,
    host: str,
    site_name: str | None = None,
    pid: int = 0,
    settings: Settings | None = None,
) -> MetricRequest:
    """Populate a request for the site's components."""
    settings = settings or Settings()

    request = MetricRequest(
        license_key=license_key,
        host=host,
        pid=pid,
        url=settings.api.url,
        timeout=settings.api.timeout_seconds,
        verify_tls=settings.api.verify_tls,
    )
    request.set_components(components)

    name = site_name or settings.plugin.default_site_name
    request.metric_name = name[:MAX_METRIC_NAME_LENGTH]
    request.metric_guid = settings.plugin.metric_guid
    request.metric_duration = settings.plugin.metric_duration
    return request


def collect(
    client: HTTPClient,
    *,
    base_url: str,
    key: str,
    host: str,
    pid: int = 0,
    measurements: Mapping[str, Measurement] = DEFAULT_MEASUREMENTS,
    settings: Settings | None = None,
) -> MetricRequest | None:
    """Fetch the site's statistics and send them.

    ``key`` is used both to reach the statistics endpoint and as the
    license key.

    Returns:
        The sent request, or None when the site has no metrics to report
        (nothing is sent in that case).
    """
    settings = settings or Settings()

    stats = fetch_site_stats(client, base_url, key, settings.source.stats_path)
    components = build_components(stats, measurements)
    if not components:
        logger.info("No metrics available from %s, nothing to send", base_url)
        return None

    site_name = stats.get("site_name")
    request = build_request(
        components,
        license_key=key,
        host=host,
        site_name=site_name if isinstance(site_name, str) else None,
        pid=pid,
        settings=settings,
    )
    request.send()
    return request
