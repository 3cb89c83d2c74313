"""
Unit tests for the GlanceEngine.

Scenarios feed timestamped samples straight into process_sample; batch tests
go through the simulated sensor so the timestamp reconstruction and sampling
switches are exercised.
"""

import unittest
import sys
import os
from unittest.mock import MagicMock

# Add project root to path for imports
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from glance.core.config import ApplicationConfig, TimerConfig
from glance.core.events import OutputChangedEvent, OutputState, Zone, ZoneChangedEvent
from glance.core.tracing import EventTracer
from glance.gestures.engine import GlanceEngine
from glance.gestures.sampler import SamplingMode
from glance.gestures.state_machine import ActivityState
from glance.gestures.timers import TimerName
from glance.hardware.accel import AccelSample, SimulatedAccelSensor
from glance.hardware.backlight import SimulatedBacklight
from glance.hardware.scheduler import SimulatedTimerService

ACTIVE = (0, -400, -800)
INACTIVE = (900, 0, 0)
ROLL = (0, 900, 0)
NOWHERE = (0, 0, 1000)


class EngineTestCase(unittest.TestCase):
    """Common fixture: an engine on simulated hardware collecting its events."""

    start_ms = 0

    def setUp(self):
        self.sensor = SimulatedAccelSensor()
        self.timers = SimulatedTimerService(start_ms=self.start_ms)
        self.backlight = SimulatedBacklight()
        self.events = []
        self.tracer = EventTracer()
        config = ApplicationConfig(
            timer=TimerConfig(activation_ms=500, short_ms=5000, long_ms=15000, roll_ms=1000)
        )
        self.engine = GlanceEngine(
            self.sensor, self.timers, self.backlight, self.events.append, config, self.tracer
        )
        self.engine.start(True, False)

    def tearDown(self):
        self.engine.stop()

    def hold(self, reading, start_ms, end_ms, step_ms=100):
        """Feed one reading every step_ms in [start_ms, end_ms)."""
        for t in range(start_ms, end_ms, step_ms):
            self.engine.process_sample(AccelSample(*reading, timestamp_ms=t))

    def outputs(self):
        return [(e.output, e.timestamp_ms) for e in self.events if isinstance(e, OutputChangedEvent)]

    def zones(self):
        return [(e.zone, e.timestamp_ms) for e in self.events if isinstance(e, ZoneChangedEvent)]


class TestGlanceScenarios(EngineTestCase):
    """Gesture scenarios driven sample by sample."""

    def test_start_state(self):
        self.assertTrue(self.engine.is_running)
        self.assertEqual(self.engine.state, ActivityState.IDLE)
        self.assertEqual(self.engine.output, OutputState.IDLE)
        self.assertEqual(self.engine.sampling_mode, SamplingMode.SLOW)
        self.assertTrue(self.sensor.is_subscribed)
        self.assertTrue(self.sensor.taps_subscribed)

    def test_raise_and_hold(self):
        """Raise and hold still: ACTIVE after the debounce, IDLE after short + long."""
        self.hold(ACTIVE, 0, 5500)
        self.assertEqual(self.engine.state, ActivityState.NEW_ACTIVE)
        self.assertTrue(self.engine.fsm.prefer_fast)

        self.hold(ACTIVE, 5500, 5600)
        self.assertEqual(self.engine.state, ActivityState.OLD_ACTIVE)
        self.assertFalse(self.engine.fsm.prefer_fast)

        self.hold(ACTIVE, 5600, 21000)
        self.assertEqual(self.zones(), [(Zone.ACTIVE, 0)])
        self.assertEqual(self.outputs(), [(OutputState.ACTIVE, 500), (OutputState.IDLE, 20500)])
        self.assertEqual(self.engine.state, ActivityState.IDLE_ACTIVE)

    def test_roll_gesture(self):
        self.hold(ACTIVE, 0, 1000)
        self.hold(ROLL, 1000, 1400)
        self.hold(ACTIVE, 1400, 1500)

        self.assertEqual(self.outputs(), [
            (OutputState.ACTIVE, 500),
            (OutputState.ROLL, 1400),
            (OutputState.ACTIVE, 1400),
        ])
        self.assertEqual(self.zones(), [(Zone.ACTIVE, 0), (Zone.ROLL, 1000), (Zone.ACTIVE, 1400)])
        self.assertEqual(self.engine.fsm.timers[TimerName.SHORT].expiry_ms, 6400)

        # The zone change is delivered before the outputs it caused
        kinds = [type(e).__name__ for e in self.events[-3:]]
        self.assertEqual(kinds, ["ZoneChangedEvent", "OutputChangedEvent", "OutputChangedEvent"])

    def test_failed_roll(self):
        """Staying rolled past the roll window returns silently to OLD_ACTIVE."""
        self.hold(ACTIVE, 0, 1000)
        self.hold(ROLL, 1000, 2100)
        self.assertEqual(self.outputs(), [(OutputState.ACTIVE, 500)])
        self.assertEqual(self.engine.state, ActivityState.OLD_ACTIVE)
        self.assertEqual(self.engine.output, OutputState.ACTIVE)

    def test_arm_hanging_down(self):
        self.hold(INACTIVE, 0, 3000)
        self.assertEqual(self.zones(), [(Zone.INACTIVE, 0)])
        self.assertEqual(self.outputs(), [])
        self.assertEqual(self.engine.state, ActivityState.IDLE)

    def test_drop_after_glance(self):
        self.hold(ACTIVE, 0, 1000)
        self.hold(INACTIVE, 1000, 3000)
        self.assertEqual(self.outputs(), [(OutputState.ACTIVE, 500), (OutputState.IDLE, 1000)])
        self.assertTrue(self.engine.fsm.timers.all_inactive())
        self.assertEqual(self.backlight.calls, ["hold_interaction", "turn_off"])

    def test_flicker_restarts_debounce(self):
        self.hold(ACTIVE, 0, 300)
        self.hold(NOWHERE, 300, 400)
        self.hold(ACTIVE, 400, 1200)
        self.assertEqual(self.outputs(), [(OutputState.ACTIVE, 900)])

    def test_backlight_held_while_glancing(self):
        self.hold(ACTIVE, 0, 600)
        self.assertTrue(self.engine.is_glancing)
        self.assertEqual(self.backlight.hold_count, 1)
        self.assertTrue(self.engine.dispatcher.holding_light)

    def test_backlight_held_through_roll(self):
        """A roll started while glancing keeps the light held; the return does not relight it."""
        for t in range(0, 1800, 100):
            self.timers.advance_to(t)
            reading = ACTIVE if t < 1000 else ROLL
            self.engine.process_sample(AccelSample(*reading, timestamp_ms=t))
        self.timers.advance_to(1800)
        self.engine.process_sample(AccelSample(*ACTIVE, timestamp_ms=1800))

        self.assertEqual([o for o, _ in self.outputs()],
                         [OutputState.ACTIVE, OutputState.ROLL, OutputState.ACTIVE])
        self.assertNotIn("turn_off", self.backlight.calls)
        self.assertGreaterEqual(self.backlight.hold_count, 3)
        self.assertTrue(self.engine.dispatcher.holding_light)

    def test_failed_roll_lets_light_go_out(self):
        for t in range(0, 2100, 100):
            self.timers.advance_to(t)
            reading = ACTIVE if t < 1000 else ROLL
            self.engine.process_sample(AccelSample(*reading, timestamp_ms=t))
        self.assertEqual(self.engine.state, ActivityState.OLD_ACTIVE)
        self.assertNotIn("turn_off", self.backlight.calls)

        self.timers.advance_to(2600)
        self.assertEqual(self.backlight.calls[-1], "turn_off")
        self.assertFalse(self.engine.dispatcher.holding_light)

    def test_events_are_traced(self):
        self.hold(ACTIVE, 0, 600)
        self.assertEqual(self.tracer.get_trace(), self.events)
        self.assertEqual(self.tracer.get_event_stats()["outputs"], {"active": 1})

    def test_stop_releases_hardware(self):
        self.hold(ACTIVE, 0, 600)
        self.engine.stop()
        self.engine.stop()
        self.assertFalse(self.engine.is_running)
        self.assertFalse(self.sensor.is_subscribed)
        self.assertFalse(self.sensor.taps_subscribed)
        self.assertEqual(self.backlight.calls[-1], "turn_off")

    def test_start_twice_is_ignored(self):
        subscribe = MagicMock(wraps=self.sensor.subscribe)
        self.sensor.subscribe = subscribe
        self.engine.start(True, False)
        subscribe.assert_not_called()


class TestBatchProcessing(EngineTestCase):
    """Batches delivered by the simulated sensor."""

    start_ms = 10000

    def deliver(self, reading, count):
        self.sensor.push_readings([reading] * count)

    def test_first_batch_timestamps_and_discard(self):
        """Sample i of N is stamped now - (N - i) * period; the first after a switch is dropped."""
        self.timers.advance_to(10700)
        self.deliver(ACTIVE, 7)

        self.assertEqual(self.zones(), [(Zone.ACTIVE, 10100)])
        self.assertEqual(self.outputs(), [(OutputState.ACTIVE, 10600)])
        self.assertFalse(self.engine.sampler.discard_next)
        self.assertEqual(self.engine.sampler.pending_mode, SamplingMode.FAST)

    def test_switch_to_fast_applied_after_delay(self):
        self.timers.advance_to(10700)
        self.deliver(ACTIVE, 7)
        self.assertEqual(self.sensor.rate_hz, 10)

        self.timers.advance(10)
        self.assertEqual(self.sensor.rate_hz, 25)
        self.assertEqual(self.sensor.batch_size, 5)
        self.assertEqual(self.engine.sampling_mode, SamplingMode.FAST)
        self.assertTrue(self.engine.sampler.discard_next)

        self.timers.advance_to(10910)
        self.deliver(ACTIVE, 5)
        self.assertFalse(self.engine.sampler.discard_next)
        self.assertEqual(self.engine.sampler.sample_period_ms, 40)

    def test_idle_batches_stay_slow(self):
        self.timers.advance_to(10700)
        self.deliver(INACTIVE, 7)
        self.timers.advance(100)
        self.assertEqual(self.engine.sampling_mode, SamplingMode.SLOW)
        self.assertIsNone(self.engine.sampler.pending_mode)

    def test_batch_while_stopped_is_ignored(self):
        self.engine.stop()
        self.engine.on_batch([AccelSample(*ACTIVE)] * 7)
        self.assertEqual(self.events, [])

    def test_wrist_motion_end_to_end(self):
        """Raise, hold, then drop, with readings pushed at the live sensor rate."""

        def feed(reading, duration_ms):
            elapsed = 0
            while elapsed < duration_ms:
                period = 1000 // self.sensor.rate_hz
                self.timers.advance(period)
                self.sensor.push(*reading)
                elapsed += period

        feed(INACTIVE, 1000)
        feed(ACTIVE, 7000)
        feed(INACTIVE, 1000)
        self.timers.advance(50)

        self.assertEqual([o for o, _ in self.outputs()], [OutputState.ACTIVE, OutputState.IDLE])
        self.assertGreater(self.backlight.hold_count, 1)
        self.assertIn("turn_off", self.backlight.calls)
        self.assertEqual(self.engine.state, ActivityState.IDLE)
        self.assertEqual(self.engine.sampling_mode, SamplingMode.SLOW)
        self.assertFalse(self.engine.dispatcher.holding_light)


if __name__ == "__main__":
    unittest.main()
