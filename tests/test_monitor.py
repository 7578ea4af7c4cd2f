import asyncio
import unittest

from abstractions.observer import HealthObserver
from contracts.health import AggregateStatus
from core.errors import ConfigurationError
from core.health_classifier import HealthClassifier
from core.monitor import Monitor, MonitorState
from fakes import AWS, GCP, ScriptedProber


class RecordingObserver(HealthObserver):
    def __init__(self, stop_after=None, monitor=None):
        self.records = []
        self.stop_after = stop_after
        self.monitor = monitor
        self.states = []

    async def on_record(self, record):
        self.records.append(record)
        if self.monitor:
            self.states.append(self.monitor.state)
        if self.stop_after and len(self.records) >= self.stop_after:
            self.monitor.stop()


class FailingObserver(HealthObserver):
    async def on_record(self, record):
        raise RuntimeError("observer broke")


def make_monitor(health, observer=None):
    classifier = HealthClassifier(ScriptedProber(health))
    return Monitor(classifier, [AWS, GCP], observer=observer)


class TestMonitor(unittest.IsolatedAsyncioTestCase):
    async def test_rejects_non_positive_interval(self):
        monitor = make_monitor({})
        for interval in (0, -5, float("nan"), float("inf")):
            with self.subTest(interval=interval):
                with self.assertRaises(ConfigurationError):
                    await monitor.run(interval)
                with self.assertRaises(ConfigurationError):
                    await monitor.start(interval)
        self.assertIs(monitor.state, MonitorState.IDLE)

    async def test_rejects_tick_limit_below_one(self):
        monitor = make_monitor({"AWS": True, "GCP": True})
        with self.assertRaises(ConfigurationError):
            await monitor.run(0.01, max_ticks=0)
        with self.assertRaises(ConfigurationError):
            await monitor.start(0.01, max_ticks=-1)
        self.assertEqual(monitor.ticks, 0)
        self.assertIs(monitor.state, MonitorState.IDLE)

    async def test_tick_emits_record(self):
        observer = RecordingObserver()
        monitor = make_monitor({"AWS": True, "GCP": False}, observer)
        record = await monitor.tick()
        self.assertEqual(record.aggregate_status, AggregateStatus.PARTIAL)
        self.assertEqual(observer.records, [record])
        self.assertIs(monitor.last_record, record)

    async def test_max_ticks_bounds_run(self):
        observer = RecordingObserver()
        monitor = make_monitor({"AWS": True, "GCP": True}, observer)
        await asyncio.wait_for(monitor.run(0.01, max_ticks=3), timeout=2)
        self.assertEqual(len(observer.records), 3)
        self.assertTrue(
            all(r.aggregate_status is AggregateStatus.ALL_HEALTHY for r in observer.records)
        )
        self.assertIs(monitor.state, MonitorState.IDLE)

    async def test_stop_ends_wait_early(self):
        observer = RecordingObserver(stop_after=1)
        monitor = make_monitor({"AWS": False, "GCP": False}, observer)
        observer.monitor = monitor
        # A 60s interval would hang the test if stop() did not cut the wait short
        await asyncio.wait_for(monitor.run(60), timeout=2)
        self.assertEqual(len(observer.records), 1)
        self.assertEqual(observer.states, [MonitorState.RUNNING])
        self.assertEqual(monitor.last_record.aggregate_status, AggregateStatus.ALL_DOWN)

    async def test_start_and_stop_task(self):
        observer = RecordingObserver()
        monitor = make_monitor({"AWS": True, "GCP": True}, observer)
        await monitor.start(0.01)
        await asyncio.sleep(0.05)
        self.assertIs(monitor.state, MonitorState.RUNNING)
        monitor.stop()
        await asyncio.wait_for(monitor.wait(), timeout=2)
        self.assertIs(monitor.state, MonitorState.IDLE)
        self.assertGreaterEqual(len(observer.records), 1)

    async def test_stop_immediately_after_start(self):
        observer = RecordingObserver()
        monitor = make_monitor({"AWS": True, "GCP": True}, observer)
        await monitor.start(0.01)
        self.assertIs(monitor.state, MonitorState.RUNNING)
        monitor.stop()
        await asyncio.wait_for(monitor.wait(), timeout=1)
        self.assertIs(monitor.state, MonitorState.IDLE)
        self.assertEqual(observer.records, [])

    async def test_cancel_before_first_step_returns_to_idle(self):
        monitor = make_monitor({"AWS": True, "GCP": True})
        task = await monitor.start(0.01)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await monitor.wait()
        self.assertIs(monitor.state, MonitorState.IDLE)

    async def test_running_twice_is_rejected(self):
        monitor = make_monitor({"AWS": True, "GCP": True})
        await monitor.start(0.01)
        await asyncio.sleep(0.02)
        with self.assertRaises(RuntimeError):
            await monitor.run(0.01)
        monitor.stop()
        await monitor.wait()

    async def test_observer_failure_does_not_abort_loop(self):
        monitor = make_monitor({"AWS": True, "GCP": True}, FailingObserver())
        await asyncio.wait_for(monitor.run(0.01, max_ticks=2), timeout=2)
        self.assertEqual(monitor.ticks, 2)


if __name__ == "__main__":
    unittest.main()
