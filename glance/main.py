"""
Main entry point for the Glance gesture engine demo.

This module wires the engine to an asyncio loop with a simulated accelerometer
and backlight, replays a scripted wrist motion (raise, hold, roll, drop) and
logs the resulting display status. It handles signal management, logging
setup, and system lifecycle.
"""

import asyncio
import logging
import signal
import sys
import structlog
from typing import List, Tuple

from glance.core import EventTracer, get_config
from glance.core.config import LogLevel
from glance.hardware import AsyncioTimerService, SimulatedAccelSensor, SimulatedBacklight
from glance.services import GlancingService, GlanceStatus

# (phase, (x, y, z) in milli-g, duration in ms)
WRIST_SCRIPT: List[Tuple[str, Tuple[int, int, int], int]] = [
    ("arm down", (900, 0, 0), 2000),
    ("raise to look", (0, -400, -800), 7000),
    ("roll away", (0, 900, 0), 400),
    ("roll back", (0, -400, -800), 3000),
    ("drop", (900, 0, 0), 2000),
]


# Configure structured logging
def setup_logging(level: LogLevel = LogLevel.INFO):
    """Configure structured logging for the application."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Set up stdlib logging
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.value),
        stream=sys.stdout,
    )


class GlanceApplication:
    """
    Demo application for the Glance gesture engine.

    Runs the engine against simulated hardware on the asyncio loop.
    """

    def __init__(self):
        """Initialize the Glance application."""
        self.logger = structlog.get_logger(app="glance")
        self.config = get_config()

        # Set up hardware
        self.timer_service = AsyncioTimerService()
        self.sensor = SimulatedAccelSensor()
        self.backlight = SimulatedBacklight()

        # Set up event tracing if enabled
        if self.config.event.tracing_enabled:
            self.event_tracer = EventTracer(max_events=self.config.event.max_trace_events)
        else:
            self.event_tracer = None

        self.service = GlancingService(
            self.sensor, self.timer_service, self.backlight, self.config, self.event_tracer
        )
        self.status = GlanceStatus(on_change=self._log_status)
        self._running = True
        self._shut_down = False

    def _log_status(self, status: GlanceStatus) -> None:
        self.logger.info("Status", **status.as_dict())

    async def initialize(self):
        """Initialize hardware and subscribe to glance events."""
        self.logger.info("Initializing Glance demo")

        try:
            self.sensor.initialize()
            self.backlight.initialize()
            for hardware in (self.sensor, self.backlight):
                self.logger.info("Hardware status", **hardware.check_health())
            self.service.subscribe(
                self.config.backlight.control_backlight,
                self.config.backlight.legacy_flick_to_light,
                self.status,
            )
            self.logger.info("Glance demo initialization complete")

        except Exception as e:
            self.logger.error("Failed to initialize application", error=str(e), exc_info=True)
            raise

    async def run(self):
        """Replay the wrist script, feeding readings at the current sampling rate."""
        try:
            for phase, reading, duration_ms in WRIST_SCRIPT:
                if not self._running:
                    break
                self.logger.info("Wrist phase", phase=phase, reading=reading, duration_ms=duration_ms)
                elapsed = 0.0
                while self._running and elapsed * 1000 < duration_ms:
                    self.sensor.push(*reading)
                    period = 1.0 / (self.sensor.rate_hz or self.config.sampling.slow_rate_hz)
                    await asyncio.sleep(period)
                    elapsed += period

        except asyncio.CancelledError:
            self.logger.info("Application task cancelled")

        finally:
            await self.shutdown()

    async def shutdown(self):
        """Unsubscribe and shut down hardware."""
        if self._shut_down:
            return

        self._shut_down = True
        self._running = False
        self.logger.info("Shutting down Glance demo")

        self.service.unsubscribe()
        for hardware in (self.sensor, self.backlight):
            try:
                hardware.shutdown()
            except Exception as e:
                self.logger.error(f"Error shutting down {hardware.name}: {e}")

        if self.event_tracer is not None:
            self.logger.info("Event statistics", **self.event_tracer.get_event_stats())
        self.logger.info("Backlight activity", holds=self.backlight.hold_count)
        self.logger.info("Glance demo shutdown complete")

    def handle_signal(self, sig):
        """
        Handle termination signals.

        Args:
            sig: The signal received
        """
        self.logger.info(f"Received signal {sig.name}, shutting down")
        self._running = False

        # Cancel all tasks except the current one
        for task in asyncio.all_tasks():
            if task is not asyncio.current_task():
                task.cancel()


async def main():
    """Application entry point."""
    # Set up logging
    setup_logging(get_config().log_level)

    # Create and initialize the application
    app = GlanceApplication()

    # Set up signal handlers
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(
            sig, lambda s=sig: app.handle_signal(s))

    # Initialize and run the application
    await app.initialize()
    await app.run()


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
