"""
Main application orchestrator.

Handles:
- Collector and cache wiring
- Sensor poller task
- HTTP exposition server
- Graceful shutdown
"""

import asyncio
import signal

from .collectors.gauges import CachedGaugeCollector, create_caches
from .collectors.hddtemp import HddtempCollector
from .collectors.lm import LmSensorsPoller, SensorLibrary
from .config.schema import Config
from .const import APP_NAME
from .errors import HddtempConnectError, HddtempError
from .logging import get_logger
from .server import MetricsServer, build_registry
from .utils.hwmon import Hwmon

logger = get_logger("app")


class Application:
    """
    Main application class.

    Owns the gauge caches and hands them to both the poller (writer) and
    the exposition collector (reader).
    """

    def __init__(self, config: Config, library: SensorLibrary | None = None):
        """
        Initialize application.

        Args:
            config: Application configuration
            library: Sensor library (hwmon under config.lm.hwmon_path if None)
        """
        self.config = config

        self.caches = create_caches()
        self.poller = LmSensorsPoller(
            library or Hwmon(config.lm.hwmon_path),
            self.caches,
            interval=config.lm.interval,
        )
        self.hddtemp = HddtempCollector(config.hddtemp)
        self.registry = build_registry([CachedGaugeCollector(self.caches), self.hddtemp])
        self.server = MetricsServer(
            self.registry,
            config.web.host,
            config.web.port,
            config.web.telemetry_path,
        )

        self._poller_task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()

    def _connect_hddtemp(self) -> None:
        """Open the hddtemp connection; failure only disables disk metrics."""
        try:
            self.hddtemp.initialize()
        except HddtempConnectError as e:
            if self.config.hddtemp.reconnect:
                logger.warning(f"{e} (will retry on scrape)")
            else:
                logger.error(f"error reading hddtemps: {e}")

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

    def _signal_handler(self) -> None:
        """Handle shutdown signals."""
        logger.info("Received shutdown signal")
        self.request_shutdown()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def start(self) -> None:
        """
        Start the application and serve until shutdown is requested.

        Raises:
            OSError: If the listen address cannot be bound
        """
        logger.info(f"Starting {APP_NAME}")

        self._connect_hddtemp()
        self._poller_task = asyncio.create_task(self.poller.run())
        self.server.start()
        self._setup_signal_handlers()

        logger.info(f"{APP_NAME} started successfully")

        await self._shutdown_event.wait()
        await self.stop()

    async def stop(self) -> None:
        """Stop the application."""
        logger.info(f"Stopping {APP_NAME}")

        self.server.stop()

        self.poller.stop()
        if self._poller_task is not None:
            await asyncio.gather(self._poller_task, return_exceptions=True)
            self._poller_task = None

        try:
            self.hddtemp.close()
        except HddtempError as e:
            logger.error(str(e))

        logger.info(f"{APP_NAME} stopped")

    async def run(self) -> None:
        """Run the application until shutdown."""
        try:
            await self.start()
        except Exception as e:
            logger.error(f"Application error: {e}")
            await self.stop()
            raise


async def run_app(config: Config) -> None:
    """
    Create and run the application.

    Args:
        config: Validated configuration
    """
    logger.debug(f"Listen address: {config.web.listen_address}")
    logger.debug(f"Telemetry path: {config.web.telemetry_path}")
    logger.debug(f"hddtemp address: {config.hddtemp.address}")

    app = Application(config)
    await app.run()
