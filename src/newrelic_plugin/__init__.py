# New Relic plugin — push site statistics to the platform API
"""
Collects site statistics (users, nodes, comments) and reports them as
metrics to the New Relic platform API.
"""

from .errors import PluginError, PreconditionError, TransportError
from .models import (
    DEFAULT_MEASUREMENTS,
    AgentMetric,
    Measurement,
    MetricComponent,
    SimpleMetric,
)
from .request import AGENT_VERSION, MetricRequest

__all__ = [
    "AGENT_VERSION",
    "DEFAULT_MEASUREMENTS",
    "AgentMetric",
    "Measurement",
    "MetricComponent",
    "MetricRequest",
    "PluginError",
    "PreconditionError",
    "SimpleMetric",
    "TransportError",
]
