"""
Pytest configuration and fixtures.
"""

import logging
import socket
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest
from prometheus_client.parser import text_string_to_metric_families


def parse_samples(body: str) -> dict[str, list[tuple[dict[str, str], float]]]:
    """Group the samples of an exposition body by metric name."""
    samples: dict[str, list[tuple[dict[str, str], float]]] = {}
    for family in text_string_to_metric_families(body):
        for sample in family.samples:
            samples.setdefault(sample.name, []).append((sample.labels, sample.value))
    return samples


class FakeFeature:
    """Sensor feature with a settable value."""

    def __init__(self, name: str, label: str, value: float | Exception):
        self.name = name
        self.label = label
        self.value = value

    def get_value(self) -> float:
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class FakeChip:
    def __init__(self, name: str, adapter_name: str, features: list[FakeFeature]):
        self.name = name
        self.adapter_name = adapter_name
        self.features = features

    def __str__(self) -> str:
        return self.name

    def get_features(self) -> list[FakeFeature]:
        return self.features


class FakeLibrary:
    """In-memory sensor library recording its lifecycle calls."""

    def __init__(self, chips: list[FakeChip] | None = None):
        self.chips = chips or []
        self.initialized = False
        self.cleaned_up = False
        self.enumerations = 0
        self.fail_next = 0

    def init(self) -> None:
        self.initialized = True

    def cleanup(self) -> None:
        self.cleaned_up = True

    def detected_chips(self) -> list[FakeChip]:
        self.enumerations += 1
        if self.fail_next > 0:
            self.fail_next -= 1
            raise RuntimeError("chip enumeration failed")
        return self.chips


class FakeHddtemp:
    """
    Minimal hddtemp daemon.

    Sends the current payload to every new connection, then closes it
    (like hddtemp does) or leaves it idle.
    """

    def __init__(self, payload: bytes = b"", close_after_send: bool = True):
        self.payload = payload
        self.close_after_send = close_after_send
        self.connections = 0

        self._idle: list[socket.socket] = []
        self._stopped = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(16)
        self._sock.settimeout(0.05)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self._sock.getsockname()[1]}"

    def _serve(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._sock.accept()
            except TimeoutError:
                continue
            except OSError:
                return
            self.connections += 1
            if self.payload:
                conn.sendall(self.payload)
            if self.close_after_send:
                conn.close()
            else:
                self._idle.append(conn)

    def close(self) -> None:
        self._stopped.set()
        self._thread.join(timeout=2.0)
        self._sock.close()
        for conn in self._idle:
            conn.close()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers bound to streams captured during a test."""
    yield
    logging.getLogger("sensor_exporter").handlers.clear()


@pytest.fixture
def fake_library() -> FakeLibrary:
    """Library with one chip carrying one feature of each kind plus noise."""
    return FakeLibrary([
        FakeChip(
            "nct6775-isa-0290",
            "ISA adapter",
            [
                FakeFeature("fan1", "fan1", 1200.0),
                FakeFeature("temp2", "SYSTIN", 41.0),
                FakeFeature("in0", "Vcore", 1.104),
                FakeFeature("power1", "power1", 15.0),
                FakeFeature("beep_enable", "beep_enable", 1.0),
            ],
        ),
    ])


@pytest.fixture
def hddtemp_server() -> Iterator[FakeHddtemp]:
    server = FakeHddtemp(b"|/dev/sda|WDC WD40EFRX|35|C||/dev/sdb|ST4000VN008|37|C|")
    yield server
    server.close()


@pytest.fixture
def closed_address() -> str:
    """Address with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{text}\n")


def _device(sys_root: Path, relpath: str, subsystem: str) -> Path:
    device = sys_root / "devices" / relpath
    device.mkdir(parents=True)
    bus = sys_root / "bus" / subsystem
    bus.mkdir(parents=True, exist_ok=True)
    (device / "subsystem").symlink_to(bus)
    return device


@pytest.fixture
def hwmon_root(tmp_path: Path) -> Path:
    """
    Fake /sys/class/hwmon with four chips:

    hwmon0  coretemp on platform device coretemp.0
    hwmon1  nct6775 on platform device nct6775.656
    hwmon2  nvme on PCI device 0000:01:00.0
    hwmon3  acpitz without device link
    """
    sys_root = tmp_path / "sys"
    root = sys_root / "class" / "hwmon"

    hwmon0 = root / "hwmon0"
    _write(hwmon0 / "name", "coretemp")
    _write(hwmon0 / "temp1_input", "45000")
    _write(hwmon0 / "temp1_label", "Package id 0")
    _write(hwmon0 / "temp2_input", "43500")
    _write(hwmon0 / "temp1_crit", "100000")
    (hwmon0 / "device").symlink_to(_device(sys_root, "platform/coretemp.0", "platform"))

    hwmon1 = root / "hwmon1"
    _write(hwmon1 / "name", "nct6775")
    _write(hwmon1 / "fan1_input", "1200")
    _write(hwmon1 / "in0_input", "1104")
    _write(hwmon1 / "in0_label", "Vcore")
    _write(hwmon1 / "power1_average", "15000000")
    _write(hwmon1 / "intrusion0_alarm", "0")
    _write(hwmon1 / "beep_enable", "1")
    (hwmon1 / "device").symlink_to(_device(sys_root, "platform/nct6775.656", "platform"))

    hwmon2 = root / "hwmon2"
    _write(hwmon2 / "name", "nvme")
    _write(hwmon2 / "temp1_input", "38850")
    _write(hwmon2 / "temp1_label", "Composite")
    (hwmon2 / "device").symlink_to(_device(sys_root, "pci0000:00/0000:01:00.0", "pci"))

    hwmon3 = root / "hwmon3"
    _write(hwmon3 / "name", "acpitz")
    _write(hwmon3 / "temp1_input", "27800")

    return root
