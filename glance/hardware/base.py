"""
Device lifecycle shared by the accelerometer and the backlight.

Both devices are powered up once before the engine subscribes and powered
down after it unsubscribes. Power-down must leave nothing behind: the sensor
drops its batch and tap subscriptions, the backlight goes dark.
"""

import structlog
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional


class BaseHardware(ABC):
    """
    Power-up / power-down wrapper around a watch peripheral.

    Calls happen on the engine's loop inside callbacks that run to
    completion, so the lifecycle is synchronous.
    """

    def __init__(self, config: Optional[Any] = None, name: Optional[str] = None):
        """
        Args:
            config: Optional device settings (platform specific)
            name: Name used in log context; defaults to the class name
        """
        self.config = config
        self.name = name or self.__class__.__name__
        self.logger = structlog.get_logger(hardware=self.name)
        self._initialized = False

    def initialize(self) -> None:
        """
        Power the device up.

        A second call while powered logs a warning and does nothing. A driver
        failure is logged and propagated; the device stays powered down.
        """
        if self._initialized:
            self.logger.warning("Hardware already initialized")
            return

        try:
            self._initialize_impl()
            self._initialized = True
            self.logger.info("Hardware initialized")

        except Exception as e:
            self.logger.error(f"Error initializing hardware: {e}")
            raise

    def shutdown(self) -> None:
        """
        Power the device down, releasing subscriptions and the light.

        Does nothing (with a warning) when the device was never powered up.
        """
        if not self._initialized:
            self.logger.warning("Hardware not initialized")
            return

        try:
            self._shutdown_impl()
            self._initialized = False
            self.logger.info("Hardware shut down")

        except Exception as e:
            self.logger.error(f"Error shutting down hardware: {e}")
            raise

    def is_initialized(self) -> bool:
        return self._initialized

    @abstractmethod
    def _initialize_impl(self) -> None:
        """Driver power-up: clear buffers, reset the light."""
        pass

    @abstractmethod
    def _shutdown_impl(self) -> None:
        """Driver power-down: unsubscribe everything, switch the light off."""
        pass

    def check_health(self) -> Dict[str, Any]:
        """Report name and power state for the demo's status log."""
        return {
            "name": self.name,
            "initialized": self._initialized,
            "status": "ok"
        }
