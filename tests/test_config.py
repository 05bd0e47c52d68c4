"""
Tests for command-line configuration.
"""

import pytest

from sensor_exporter.__main__ import build_parser, main
from sensor_exporter.config.schema import Config, parse_address
from sensor_exporter.errors import ConfigError


@pytest.mark.parametrize(
    "address, expected",
    [
        (":9255", ("", 9255)),
        ("localhost:7634", ("localhost", 7634)),
        ("0.0.0.0:80", ("0.0.0.0", 80)),
        ("[::1]:9255", ("::1", 9255)),
    ],
)
def test_parse_address(address: str, expected: tuple[str, int]) -> None:
    """Test host:port parsing for the accepted address forms."""
    assert parse_address(address) == expected


def test_parse_address_default_host() -> None:
    """Test that an empty host falls back to the default host."""
    assert parse_address(":7634", default_host="localhost") == ("localhost", 7634)


@pytest.mark.parametrize("address", ["localhost", "host:port", "host:70000", "::1:80"])
def test_parse_address_rejects(address: str) -> None:
    """Test that malformed addresses raise ConfigError."""
    with pytest.raises(ConfigError):
        parse_address(address)


def test_defaults_from_empty_command_line() -> None:
    """Test that an empty command line yields the default configuration."""
    config = Config.from_args(build_parser().parse_args([]))

    assert config.web.listen_address == ":9255"
    assert config.web.port == 9255
    assert config.web.telemetry_path == "/metrics"
    assert config.hddtemp.endpoint == ("localhost", 7634)
    assert config.hddtemp.reconnect is True
    assert config.lm.interval == 1.0


def test_flags_override_defaults() -> None:
    """Test that every flag reaches its config field."""
    args = build_parser().parse_args([
        "--web.listen-address", "127.0.0.1:9100",
        "--web.telemetry-path", "/sensors",
        "--hddtemp-address", "nas:7634",
        "--hddtemp-no-reconnect",
    ])

    config = Config.from_args(args)

    assert (config.web.host, config.web.port) == ("127.0.0.1", 9100)
    assert config.web.telemetry_path == "/sensors"
    assert config.hddtemp.endpoint == ("nas", 7634)
    assert config.hddtemp.reconnect is False


@pytest.mark.parametrize(
    "argv",
    [
        ["--web.telemetry-path", "metrics"],
        ["--web.telemetry-path", "/"],
        ["--hddtemp-address", "nowhere"],
        ["--lm-interval", "0"],
        ["--hddtemp-timeout", "-1"],
    ],
)
def test_invalid_flags(argv: list[str]) -> None:
    """Test that invalid flag values fail validation."""
    with pytest.raises(ConfigError):
        Config.from_args(build_parser().parse_args(argv))


def test_main_validate(capsys: pytest.CaptureFixture) -> None:
    """Test that --validate prints the summary and exits successfully."""
    assert main(["--validate", "--no-color"]) == 0
    assert "Configuration is valid!" in capsys.readouterr().out


def test_main_rejects_bad_config(capsys: pytest.CaptureFixture) -> None:
    """Test that a bad listen address makes main() fail."""
    assert main(["--web.listen-address", "nope", "--validate"]) == 1
    assert "Configuration error" in capsys.readouterr().err
