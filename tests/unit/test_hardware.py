"""
Unit tests for the hardware abstractions and their simulated implementations.
"""

import unittest
import sys
import os
from unittest.mock import MagicMock

# Add project root to path for imports
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from glance.hardware.accel import AccelSample, SimulatedAccelSensor
from glance.hardware.backlight import SimulatedBacklight


class FailingBacklight(SimulatedBacklight):
    def _initialize_impl(self):
        raise RuntimeError("no backlight")


class TestBaseHardware(unittest.TestCase):
    """Lifecycle behaviour shared by all hardware."""

    def test_lifecycle(self):
        backlight = SimulatedBacklight(name="screen")
        self.assertFalse(backlight.is_initialized())
        backlight.initialize()
        backlight.initialize()
        self.assertTrue(backlight.is_initialized())
        self.assertEqual(backlight.check_health(),
                         {"name": "screen", "initialized": True, "status": "ok"})
        backlight.shutdown()
        self.assertFalse(backlight.is_initialized())

    def test_shutdown_when_not_initialized(self):
        backlight = SimulatedBacklight()
        backlight.shutdown()
        self.assertFalse(backlight.is_initialized())

    def test_initialize_failure_is_reraised(self):
        backlight = FailingBacklight()
        with self.assertRaises(RuntimeError):
            backlight.initialize()
        self.assertFalse(backlight.is_initialized())


class TestSimulatedAccelSensor(unittest.TestCase):
    """Test cases for the SimulatedAccelSensor class."""

    def setUp(self):
        self.sensor = SimulatedAccelSensor()
        self.sensor.initialize()
        self.handler = MagicMock()

    def test_readings_dropped_while_unsubscribed(self):
        self.sensor.push(1, 2, 3)
        self.sensor.subscribe(2, 10, self.handler)
        self.sensor.push(4, 5, 6)
        self.handler.assert_not_called()

    def test_full_batches_delivered_in_order(self):
        self.sensor.subscribe(3, 10, self.handler)
        self.sensor.push_readings([(i, 0, 0) for i in range(7)])
        self.assertEqual(self.handler.call_count, 2)
        first = self.handler.call_args_list[0].args[0]
        self.assertEqual([s.x for s in first], [0, 1, 2])
        self.assertIsInstance(first[0], AccelSample)
        self.assertEqual(self.sensor.batches_delivered, 2)

    def test_batch_size_change_applies_to_next_batch(self):
        self.sensor.subscribe(3, 10, self.handler)
        self.sensor.push_readings([(0, 0, 0)] * 2)
        self.sensor.set_batch_size(5)
        self.sensor.push_readings([(0, 0, 0)] * 2)
        self.handler.assert_not_called()
        self.sensor.push(0, 0, 0)
        self.assertEqual(len(self.handler.call_args.args[0]), 5)

    def test_taps(self):
        tap_handler = MagicMock()
        self.sensor.tap()
        self.sensor.subscribe_taps(tap_handler)
        self.sensor.tap("y", -1)
        tap_handler.assert_called_once_with("y", -1)

    def test_shutdown_drops_subscriptions(self):
        self.sensor.subscribe(3, 10, self.handler)
        self.sensor.subscribe_taps(MagicMock())
        self.sensor.shutdown()
        self.assertFalse(self.sensor.is_subscribed)
        self.assertFalse(self.sensor.taps_subscribed)


class TestSimulatedBacklight(unittest.TestCase):
    """Test cases for the SimulatedBacklight class."""

    def test_records_calls(self):
        backlight = SimulatedBacklight()
        backlight.hold_interaction()
        self.assertTrue(backlight.is_lit)
        backlight.turn_off()
        self.assertFalse(backlight.is_lit)
        self.assertEqual(backlight.calls, ["hold_interaction", "turn_off"])

    def test_shutdown_turns_light_off(self):
        backlight = SimulatedBacklight()
        backlight.initialize()
        backlight.hold_interaction()
        backlight.shutdown()
        self.assertEqual(backlight.calls[-1], "turn_off")


if __name__ == "__main__":
    unittest.main()
