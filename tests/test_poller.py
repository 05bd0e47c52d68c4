"""
Tests for the local sensor poller.
"""

import asyncio

import pytest

from conftest import FakeChip, FakeFeature, FakeLibrary
from sensor_exporter.collectors.gauges import create_caches
from sensor_exporter.collectors.lm import LmSensorsPoller, classify_feature
from sensor_exporter.errors import SensorLibraryError
from sensor_exporter.models.reading import SensorCategory


@pytest.mark.parametrize(
    "name, category",
    [
        ("temp2_input", SensorCategory.TEMPERATURE),
        ("fan1_input", SensorCategory.FAN),
        ("in0_input", SensorCategory.VOLTAGE),
        ("power1_input", SensorCategory.POWER),
        ("temp1", SensorCategory.TEMPERATURE),
        ("beep_enable", None),
        ("curr1_input", None),
    ],
)
def test_classify_feature(name: str, category: SensorCategory | None) -> None:
    """Test feature classification by name prefix."""
    assert classify_feature(name) is category


def test_poll_once_fills_caches(fake_library: FakeLibrary) -> None:
    """Test that one poll fills every category cache."""
    caches = create_caches()
    poller = LmSensorsPoller(fake_library, caches)

    assert poller.poll_once() == 4

    chip = ("nct6775-isa-0290", "ISA adapter")
    assert caches[SensorCategory.FAN].snapshot() == {("fan1", *chip): 1200.0}
    assert caches[SensorCategory.TEMPERATURE].snapshot() == {("SYSTIN", *chip): 41.0}
    assert caches[SensorCategory.VOLTAGE].snapshot() == {("Vcore", *chip): 1.104}
    assert caches[SensorCategory.POWER].snapshot() == {("power1", *chip): 15.0}


def test_second_poll_overwrites(fake_library: FakeLibrary) -> None:
    """Test that a second poll overwrites earlier values."""
    caches = create_caches()
    poller = LmSensorsPoller(fake_library, caches)

    poller.poll_once()
    fake_library.chips[0].features[0].value = 900.0
    poller.poll_once()

    assert caches[SensorCategory.FAN].snapshot() == {
        ("fan1", "nct6775-isa-0290", "ISA adapter"): 900.0,
    }


def test_unreadable_feature_is_skipped() -> None:
    """Test that a failing feature does not stop the others."""
    library = FakeLibrary([
        FakeChip("coretemp-isa-0000", "ISA adapter", [
            FakeFeature("temp1", "Package id 0", OSError("No data available")),
            FakeFeature("temp2", "Core 0", 44.0),
        ]),
    ])
    caches = create_caches()

    assert LmSensorsPoller(library, caches).poll_once() == 1
    assert caches[SensorCategory.TEMPERATURE].snapshot() == {
        ("Core 0", "coretemp-isa-0000", "ISA adapter"): 44.0,
    }


async def _run_until(poller: LmSensorsPoller, cycles: int) -> None:
    task = asyncio.create_task(poller.run())
    for _ in range(500):
        if poller.cycles >= cycles:
            break
        await asyncio.sleep(0.01)
    poller.stop()
    await asyncio.wait_for(task, timeout=2.0)


def test_run_survives_enumeration_errors(fake_library: FakeLibrary) -> None:
    """Test that the loop keeps polling after failed cycles."""
    fake_library.fail_next = 2
    caches = create_caches()
    poller = LmSensorsPoller(fake_library, caches, interval=0.01)

    asyncio.run(_run_until(poller, cycles=2))

    assert fake_library.enumerations >= 4
    assert poller.cycles >= 2
    assert len(caches[SensorCategory.FAN]) == 1


def test_run_initializes_and_cleans_up(fake_library: FakeLibrary) -> None:
    """Test that run() initializes and cleans up the library."""
    poller = LmSensorsPoller(fake_library, create_caches(), interval=0.01)

    asyncio.run(_run_until(poller, cycles=1))

    assert fake_library.initialized
    assert fake_library.cleaned_up
    assert poller.stopped


def test_run_exits_when_library_cannot_init() -> None:
    """Test that a library init failure ends the poller quietly."""
    class BrokenLibrary(FakeLibrary):
        def init(self) -> None:
            raise SensorLibraryError("hwmon directory not found")

    library = BrokenLibrary()
    poller = LmSensorsPoller(library, create_caches(), interval=0.01)

    asyncio.run(asyncio.wait_for(poller.run(), timeout=2.0))

    assert library.enumerations == 0
    assert not library.cleaned_up


def test_stop_interrupts_sleep(fake_library: FakeLibrary) -> None:
    """Test that stop() does not wait out the interval."""
    poller = LmSensorsPoller(fake_library, create_caches(), interval=60.0)

    async def scenario() -> None:
        task = asyncio.create_task(poller.run())
        await asyncio.sleep(0.05)
        poller.stop()
        await asyncio.wait_for(task, timeout=2.0)

    asyncio.run(scenario())

    assert poller.cycles == 1
