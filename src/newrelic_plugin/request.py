"""A single request to the New Relic platform (plugin) API.

Usage:
    request = MetricRequest(license_key="...", host="web1.example.com")
    request.metric_name = "My site"
    request.metric_guid = "org.Drupal"
    request.metric_duration = 300
    request.add_component(SimpleMetric(name="total_users", units="users", value=1337))
    request.send()
    print(request.response)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import httpx

from src.common.config import DEFAULT_API_URL

from .errors import PreconditionError, TransportError
from .models import (
    MAX_METRIC_NAME_LENGTH,
    AgentMetric,
    MetricComponent,
    SimpleMetric,
    is_duration,
)

logger = logging.getLogger(__name__)

AGENT_VERSION = "1.0.0"
DEFAULT_TIMEOUT = 30.0


class MetricRequest:
    """Agent identity plus the components to report, sent as one POST.

    The request is populated by assigning attributes and adding components;
    nothing is checked until ``validate()`` runs, which ``to_json()`` and
    ``send()`` do first. Treat an instance as single-use: sending again
    replaces ``response`` with the new exchange.
    """

    def __init__(
        self,
        license_key: str = "",
        host: str = "",
        pid: int = 0,
        url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        verify_tls: bool = True,
    ) -> None:
        self.url = url
        # Account or user license key from the New Relic account settings
        self.license_key = license_key
        # FQDN of the machine making the request, not the site
        self.host = host
        self.pid = pid
        self.timeout = timeout
        self.verify_tls = verify_tls

        # Shared identity of the simple metrics
        self.metric_name = ""
        self.metric_guid = ""
        self.metric_duration = 0

        self._components: list[MetricComponent] = []
        self.response: str | None = None
        self.status_code: int | None = None

    # --- Components ---

    @property
    def components(self) -> list[MetricComponent]:
        """Components currently attached, in insertion order."""
        return list(self._components)

    def add_component(self, component: MetricComponent) -> None:
        """Append a component. Completeness is only checked at send time."""
        self._components.append(component)

    def set_components(self, components: Iterable[MetricComponent]) -> None:
        """Replace all components, keeping the given order."""
        self._components = list(components)

    # --- Validation ---

    def validate(self) -> None:
        """Check the request can be serialized and sent.

        Raises:
            PreconditionError: On the first missing or invalid field.
        """
        if not self.host:
            raise PreconditionError(
                "Agent not ready: the agent details (host) have not been set."
            )
        if not self.license_key:
            raise PreconditionError("The license key has not been set.")

        if any(isinstance(c, SimpleMetric) for c in self._components):
            missing = [
                field_name
                for field_name, value in (
                    ("metric_name", self.metric_name),
                    ("metric_guid", self.metric_guid),
                )
                if not value or not isinstance(value, str)
            ]
            if not self.metric_duration:
                missing.append("metric_duration")
            if missing:
                raise PreconditionError(
                    f"Metric details not set: {', '.join(missing)}"
                )
            if not is_duration(self.metric_duration):
                raise PreconditionError(
                    "metric_duration must be a positive whole number of "
                    f"seconds: {self.metric_duration!r}"
                )
            if len(self.metric_name) > MAX_METRIC_NAME_LENGTH:
                raise PreconditionError(
                    f"metric_name is longer than {MAX_METRIC_NAME_LENGTH} "
                    f"characters: {self.metric_name!r}"
                )

        for index, component in enumerate(self._components):
            if not component.is_complete():
                raise PreconditionError(
                    f"Component {index} is incomplete: {component!r}"
                )

    def is_ready(self) -> bool:
        """True if ``validate()`` passes."""
        try:
            self.validate()
        except PreconditionError:
            return False
        return True

    # --- Serialization ---

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON envelope the API expects."""
        self.validate()

        agent: dict[str, Any] = {"host": self.host, "version": AGENT_VERSION}
        if self.pid:
            agent["pid"] = int(self.pid)

        return {
            "agent": agent,
            "components": [self._component_entry(c) for c in self._components],
        }

    def _component_entry(self, component: MetricComponent) -> dict[str, Any]:
        if isinstance(component, AgentMetric):
            return {
                "name": component.name,
                "guid": component.guid,
                "duration": int(component.duration),
                "metrics": int(component.value),
            }
        # Simple metrics report under the request's shared identity
        return {
            "name": self.metric_name,
            "guid": self.metric_guid,
            "duration": int(self.metric_duration),
            "metrics": {component.display_key: int(component.value)},
        }

    def to_json(self) -> str:
        """Serialize the envelope to a compact JSON string."""
        return json.dumps(self.to_payload(), separators=(",", ":"))

    # --- Transport ---

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-License-Key": self.license_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def send(self) -> str:
        """POST the request and store the raw response.

        The response body is stored whatever the HTTP status; interpreting
        it is left to the caller.

        Returns:
            The raw response body.

        Raises:
            PreconditionError: The request is not ready (no network call made).
            TransportError: The exchange could not be completed.
        """
        body = self.to_json()

        logger.info(
            "Sending %d component(s) for host %s to %s",
            len(self._components),
            self.host,
            self.url,
        )
        try:
            resp = httpx.post(
                self.url,
                content=body,
                headers=self.headers,
                timeout=self.timeout,
                verify=self.verify_tls,
            )
        except httpx.TransportError as exc:
            logger.error("Could not reach %s: %s", self.url, exc)
            raise TransportError(f"Request to {self.url} failed: {exc}") from exc

        self.status_code = resp.status_code
        self.response = resp.text
        logger.info("API responded with status %s", resp.status_code)
        return self.response
