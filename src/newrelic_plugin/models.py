"""Data models for the metric components sent to the platform API.

A component is one measured quantity, such as the number of users on the
site right now. It comes in two shapes:

- ``SimpleMetric``: name, optional category, units and value. All simple
  metrics of a request share the request's name/guid/duration and are sent
  together under their display keys.
- ``AgentMetric``: a self-contained metric stream with its own display name,
  guid and duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

MAX_METRIC_NAME_LENGTH = 32


def _is_count(value: object) -> bool:
    """Non-zero integer, bools excluded."""
    return isinstance(value, int) and not isinstance(value, bool) and value != 0


def is_duration(value: object) -> bool:
    """Positive whole number of seconds."""
    return _is_count(value) and value > 0


@dataclass
class SimpleMetric:
    """A named, unit-tagged measurement (e.g. ``total_users`` in ``users``)."""
    name: str = ""
    units: str = ""
    value: int = 0
    category: str = ""

    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.units) and _is_count(self.value)

    @property
    def display_key(self) -> str:
        """Metric key as the API expects it: ``Component/{category/}{name}[{units}]``."""
        prefix = f"{self.category}/" if self.category else ""
        return f"Component/{prefix}{self.name}[{self.units}]"


@dataclass
class AgentMetric:
    """A metric stream identified by its own reverse-domain guid."""
    name: str = ""
    guid: str = ""  # e.g. org.Drupal
    duration: int = 0  # seconds
    value: int = 0

    def is_complete(self) -> bool:
        return (
            isinstance(self.name, str)
            and bool(self.name)
            and len(self.name) <= MAX_METRIC_NAME_LENGTH
            and bool(self.guid)
            and is_duration(self.duration)
            and _is_count(self.value)
        )


MetricComponent = Union[SimpleMetric, AgentMetric]


@dataclass(frozen=True)
class Measurement:
    """One row of the machine-name to label/units table used by the collector."""
    label: str
    units: str


# Things measured on the site, keyed by the machine name the site reports.
DEFAULT_MEASUREMENTS: Mapping[str, Measurement] = MappingProxyType({
    "total_users": Measurement(label="Total Users", units="users"),
    "total_nodes": Measurement(label="Total Nodes", units="nodes"),
    "total_comments": Measurement(label="Total Comments", units="comments"),
})
