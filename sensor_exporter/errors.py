"""
Exception hierarchy for Sensor Exporter.

Configuration errors are fatal at startup. Everything else is caught at the
scrape or poll boundary and logged, so a failing source only makes its
metrics go missing or stale.
"""

from enum import Enum


class SensorExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(SensorExporterError):
    """Exception raised for configuration errors."""


class SensorLibraryError(SensorExporterError):
    """Raised when sensor chips or features cannot be enumerated."""


class HddtempError(SensorExporterError):
    """Base class for hddtemp connection errors."""


class HddtempConnectError(HddtempError):
    """Connection to the hddtemp daemon could not be established."""


class HddtempReadError(HddtempError):
    """Reading a response from the hddtemp daemon failed."""


class HddtempCloseError(HddtempError):
    """Closing the hddtemp socket failed."""


class ParseFailure(Enum):
    """Why an hddtemp envelope was rejected."""
    MALFORMED_ENVELOPE = "malformed_envelope"
    WRONG_FIELD_COUNT = "wrong_field_count"
    UNSUPPORTED_UNIT = "unsupported_unit"
    BAD_NUMBER = "bad_number"


class HddtempParseError(SensorExporterError, ValueError):
    """Exception for malformed hddtemp output."""

    def __init__(self, reason: ParseFailure, message: str):
        self.reason = reason
        super().__init__(message)
