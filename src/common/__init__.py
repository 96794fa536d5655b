# Common utilities and shared modules
"""
Shared components used by the plugin:
- Project configuration
- Logging configuration
- HTTP client for the statistics source
"""

from .config import PROJECT_ROOT, Settings
from .http_client import HTTPClient
from .logging import setup_logging

__all__ = [
    "PROJECT_ROOT",
    "Settings",
    "HTTPClient",
    "setup_logging",
]
