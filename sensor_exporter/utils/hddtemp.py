"""
Parser for the hddtemp daemon's TCP output.

hddtemp answers every connection with a single envelope and then goes quiet:

    |/dev/sda|WDC WD40EFRX-68N32N0|35|C||/dev/sdb|ST4000VN008-2DR166|37|C|

Each drive is four '|'-separated fields (device, model id, temperature,
unit) and drives are separated by '||'.
"""

from ..errors import HddtempParseError, ParseFailure
from ..models.reading import DiskTemperature

DELIMITER = "|"
ITEM_SEPARATOR = DELIMITER * 2
CELSIUS = "C"


def _parse_temperature(text: str) -> float:
    """Parse a base-10 temperature, rejecting what float() tolerates beyond that."""
    if not text or not text.isascii() or text.strip() != text or "_" in text:
        raise ValueError(text)
    return float(text)


def parse_hddtemp_item(item: str) -> DiskTemperature:
    """
    Parse a single drive entry (without surrounding delimiters).

    Args:
        item: Entry like "/dev/sda|WDC WD40EFRX|35|C"

    Returns:
        DiskTemperature for the drive

    Raises:
        HddtempParseError: If the entry is malformed
    """
    pieces = item.split(DELIMITER)
    if len(pieces) != 4:
        raise HddtempParseError(
            ParseFailure.WRONG_FIELD_COUNT,
            f"expected 4 fields in hddtemp item, got {len(pieces)}: {item!r}",
        )

    device, drive_id, temp_text, unit = pieces
    if unit != CELSIUS:
        raise HddtempParseError(
            ParseFailure.UNSUPPORTED_UNIT,
            f"unsupported temperature unit {unit!r} in hddtemp item {item!r}, "
            f"only {CELSIUS!r} is accepted",
        )

    try:
        celsius = _parse_temperature(temp_text)
    except ValueError:
        raise HddtempParseError(
            ParseFailure.BAD_NUMBER,
            f"cannot parse temperature {temp_text!r} as a number in hddtemp item {item!r}",
        ) from None

    return DiskTemperature(device=device, id=drive_id, celsius=celsius)


def parse_hddtemp(raw: str) -> list[DiskTemperature]:
    """
    Parse a full hddtemp envelope.

    Parsing is all-or-nothing: the first malformed item aborts the call.

    Args:
        raw: Envelope as received from the daemon

    Returns:
        One DiskTemperature per drive, in input order

    Raises:
        HddtempParseError: If the envelope or any item is malformed
    """
    if not raw.startswith(DELIMITER):
        raise HddtempParseError(
            ParseFailure.MALFORMED_ENVELOPE,
            f"hddtemp output does not start with {DELIMITER!r}: {raw[:80]!r}",
        )

    return [parse_hddtemp_item(item) for item in raw[1:-1].split(ITEM_SEPARATOR)]
