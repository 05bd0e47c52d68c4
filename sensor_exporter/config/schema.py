"""
Configuration schema with dataclasses for validation and type safety.

The exporter is configured from command-line flags only; Config.from_args()
turns the parsed argparse namespace into these sections.
"""

import argparse
from dataclasses import dataclass, field

from ..const import (
    DEFAULT_HDDTEMP_ADDRESS,
    DEFAULT_HDDTEMP_TIMEOUT,
    DEFAULT_HWMON_PATH,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LM_INTERVAL,
    DEFAULT_TELEMETRY_PATH,
)
from ..errors import ConfigError


def parse_address(address: str, default_host: str = "") -> tuple[str, int]:
    """
    Split a "host:port" address.

    Accepts "host:port", ":port" (host falls back to default_host) and
    "[ipv6]:port".

    Args:
        address: Address string
        default_host: Host used when the address has none

    Returns:
        Tuple of (host, port)

    Raises:
        ConfigError: If the address has no valid port
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ConfigError(f"Address {address!r} is missing a port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ConfigError(f"IPv6 address {address!r} must be written as [host]:port")

    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"Invalid port in address {address!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"Port out of range in address {address!r}")

    return host or default_host, port


@dataclass
class WebConfig:
    """HTTP exposition configuration."""
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    telemetry_path: str = DEFAULT_TELEMETRY_PATH

    @property
    def host(self) -> str:
        return parse_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return parse_address(self.listen_address)[1]


@dataclass
class HddtempConfig:
    """hddtemp daemon connection configuration."""
    address: str = DEFAULT_HDDTEMP_ADDRESS
    timeout: float = DEFAULT_HDDTEMP_TIMEOUT
    reconnect: bool = True

    @property
    def endpoint(self) -> tuple[str, int]:
        return parse_address(self.address, default_host="localhost")


@dataclass
class LmSensorsConfig:
    """Local hwmon polling configuration."""
    interval: float = DEFAULT_LM_INTERVAL
    hwmon_path: str = DEFAULT_HWMON_PATH


@dataclass
class Config:
    """Root configuration object."""
    web: WebConfig = field(default_factory=WebConfig)
    hddtemp: HddtempConfig = field(default_factory=HddtempConfig)
    lm: LmSensorsConfig = field(default_factory=LmSensorsConfig)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Config":
        """
        Create Config from parsed command-line arguments.

        Missing attributes keep their defaults, so partial namespaces work.

        Raises:
            ConfigError: If any value is invalid
        """
        config = cls(
            web=WebConfig(
                listen_address=getattr(args, "listen_address", DEFAULT_LISTEN_ADDRESS),
                telemetry_path=getattr(args, "telemetry_path", DEFAULT_TELEMETRY_PATH),
            ),
            hddtemp=HddtempConfig(
                address=getattr(args, "hddtemp_address", DEFAULT_HDDTEMP_ADDRESS),
                timeout=getattr(args, "hddtemp_timeout", DEFAULT_HDDTEMP_TIMEOUT),
                reconnect=not getattr(args, "hddtemp_no_reconnect", False),
            ),
            lm=LmSensorsConfig(
                interval=getattr(args, "lm_interval", DEFAULT_LM_INTERVAL),
                hwmon_path=getattr(args, "hwmon_path", DEFAULT_HWMON_PATH),
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check values that argparse cannot.

        Raises:
            ConfigError: On the first invalid value
        """
        parse_address(self.web.listen_address)
        parse_address(self.hddtemp.address, default_host="localhost")

        if not self.web.telemetry_path.startswith("/"):
            raise ConfigError(
                f"Telemetry path must start with '/': {self.web.telemetry_path!r}"
            )
        if self.web.telemetry_path == "/":
            raise ConfigError("Telemetry path cannot be '/', it serves the index page")
        if self.hddtemp.timeout <= 0:
            raise ConfigError(f"hddtemp timeout must be positive: {self.hddtemp.timeout}")
        if self.lm.interval <= 0:
            raise ConfigError(f"Poll interval must be positive: {self.lm.interval}")
