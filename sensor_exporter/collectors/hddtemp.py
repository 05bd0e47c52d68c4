"""
Disk temperature collector backed by the hddtemp daemon.

hddtemp writes one envelope per TCP connection and then leaves the
connection idle or closes it. Every scrape drains whatever the daemon sent
on the current connection, parses it and exposes the drives found. Bytes
read during one scrape are never reused by the next one.
"""

import socket
import threading
import time
from collections.abc import Iterable

from prometheus_client.core import Metric

from ..config.schema import HddtempConfig
from ..const import HDDTEMP_METRIC
from ..errors import (
    HddtempCloseError,
    HddtempConnectError,
    HddtempParseError,
    HddtempReadError,
)
from ..logging import get_logger
from ..models.reading import DiskTemperature
from ..utils.hddtemp import parse_hddtemp
from .base import MetricCollector, gauge_family

logger = get_logger("collectors.hddtemp")

RECV_SIZE = 4096

# Once data has started arriving, a pause this long ends the response
DEFAULT_IDLE_TIMEOUT = 0.5


class HddtempCollector(MetricCollector):
    """
    Collector for drive temperatures reported by hddtemp.

    The socket and the read are guarded by a lock, so concurrent scrapes
    queue behind each other instead of interleaving reads.
    """

    def __init__(self, config: HddtempConfig, idle_timeout: float = DEFAULT_IDLE_TIMEOUT):
        """
        Initialize hddtemp collector.

        Args:
            config: hddtemp connection settings
            idle_timeout: Pause (seconds) that ends a response once bytes arrived
        """
        self.config = config
        self.idle_timeout = idle_timeout

        self._sock: socket.socket | None = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        """Whether a socket is currently held."""
        return self._sock is not None

    def _connect(self, timeout: float) -> socket.socket:
        try:
            return socket.create_connection(self.config.endpoint, timeout=timeout)
        except OSError as e:
            raise HddtempConnectError(
                f"error connecting to hddtemp address '{self.config.address}': {e}"
            ) from e

    def initialize(self) -> None:
        """
        Open the connection to the daemon.

        Raises:
            HddtempConnectError: If the daemon cannot be reached
        """
        with self._lock:
            self._sock = self._connect(self.config.timeout)
        logger.info(f"Connected to hddtemp at {self.config.address}")

    def close(self) -> None:
        """
        Release the connection.

        Raises:
            HddtempCloseError: If the socket cannot be closed
        """
        with self._lock:
            sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError as e:
            raise HddtempCloseError(f"error closing hddtemp socket: {e}") from e

    def _drop_connection(self) -> None:
        """Forget the current socket so the next scrape reconnects."""
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.debug(f"Error closing stale hddtemp socket: {e}")

    def _read_response(self, sock: socket.socket, deadline: float) -> tuple[bytes, bool]:
        """
        Read until the daemon closes the stream or goes quiet.

        Args:
            sock: Connected socket
            deadline: time.monotonic() value after which the read gives up

        Returns:
            Tuple of (bytes read, whether the peer closed the stream)

        Raises:
            HddtempReadError: On a socket error, or if nothing arrives in time
        """
        buffer = bytearray()

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                if buffer:
                    return bytes(buffer), False
                raise HddtempReadError(
                    f"no response from hddtemp within {self.config.timeout}s"
                )

            sock.settimeout(min(remaining, self.idle_timeout) if buffer else remaining)
            try:
                chunk = sock.recv(RECV_SIZE)
            except TimeoutError:
                if buffer:
                    return bytes(buffer), False
                raise HddtempReadError(
                    f"no response from hddtemp within {self.config.timeout}s"
                ) from None
            except OSError as e:
                raise HddtempReadError(f"error reading from hddtemp socket: {e}") from e

            if not chunk:
                return bytes(buffer), True
            buffer.extend(chunk)

    def collect_temperatures(self) -> list[DiskTemperature]:
        """
        Fetch and parse one response from the daemon.

        Connecting and reading share one deadline of config.timeout seconds.
        Never raises: read errors, parse errors and empty responses are
        logged and yield an empty list for this scrape.

        Returns:
            Drive temperatures in the order hddtemp reported them
        """
        with self._lock:
            deadline = time.monotonic() + self.config.timeout

            if self.config.reconnect:
                # hddtemp answers on connect, so a socket left over from
                # startup would hand out temperatures from back then
                self._drop_connection()
                try:
                    self._sock = self._connect(self.config.timeout)
                except HddtempConnectError as e:
                    logger.warning(str(e))
                    return []
            elif self._sock is None:
                logger.debug("No hddtemp connection, skipping disk temperatures")
                return []

            try:
                raw, closed = self._read_response(self._sock, deadline)
            except HddtempReadError as e:
                logger.error(f"error reading temps from hddtemp daemon: {e}")
                return []
            finally:
                # hddtemp answers once per connection
                if self.config.reconnect:
                    self._drop_connection()

            if closed:
                logger.debug("hddtemp closed the connection")

        if not raw:
            logger.warning("empty response from hddtemp daemon")
            return []

        try:
            return parse_hddtemp(raw.decode("utf-8", errors="replace"))
        except HddtempParseError as e:
            logger.error(f"error parsing temps from hddtemp daemon: {e}")
            return []

    def describe(self) -> Iterable[Metric]:
        yield gauge_family(HDDTEMP_METRIC, "temperature in celsius", ["device", "id"])

    def collect(self) -> Iterable[Metric]:
        try:
            temps = self.collect_temperatures()
        except Exception as e:
            logger.exception(f"Unexpected error collecting hddtemp metrics: {e}")
            return

        if not temps:
            return

        family = gauge_family(HDDTEMP_METRIC, "temperature in celsius", ["device", "id"])
        for temp in temps:
            family.add_metric([temp.device, temp.id], temp.celsius)
        yield family

    def __repr__(self) -> str:
        status = "connected" if self.connected else "disconnected"
        return f"HddtempCollector({self.config.address!r}, {status})"
