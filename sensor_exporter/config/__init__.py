"""
Command-line driven configuration.
"""

from ..errors import ConfigError
from .schema import Config, HddtempConfig, LmSensorsConfig, WebConfig, parse_address

__all__ = [
    "Config",
    "ConfigError",
    "WebConfig",
    "HddtempConfig",
    "LmSensorsConfig",
    "parse_address",
]
