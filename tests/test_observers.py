import unittest
from datetime import datetime, timezone

from contracts.health import AggregateStatus, HealthSnapshot, HealthVerdict, MonitorRecord
from core.metrics_manager import MetricsManager
from core.observers import CompositeObserver, LoggingObserver, MetricsObserver


def record_for(aws, gcp):
    snapshot = HealthSnapshot(
        verdicts={"AWS": HealthVerdict.from_bool(aws), "GCP": HealthVerdict.from_bool(gcp)}
    )
    return MonitorRecord(
        timestamp=datetime.now(timezone.utc),
        snapshot=snapshot,
        aggregate_status=snapshot.aggregate_status,
    )


class TestObservers(unittest.IsolatedAsyncioTestCase):
    async def test_logging_observer_levels(self):
        observer = LoggingObserver()
        with self.assertLogs("core.observers", level="INFO") as logs:
            await observer.on_record(record_for(True, True))
            await observer.on_record(record_for(True, False))
            await observer.on_record(record_for(False, False))
        output = "\n".join(logs.output)
        self.assertIn("INFO:core.observers:All servers healthy", output)
        self.assertIn("WARNING:core.observers:Partial outage detected", output)
        self.assertIn("ERROR:core.observers:All servers down", output)
        self.assertIn("GCP: UNHEALTHY", output)
        self.assertEqual(observer.records, [])

    async def test_logging_observer_history_is_bounded(self):
        observer = LoggingObserver(history=2)
        records = [record_for(True, True), record_for(False, True), record_for(False, False)]
        for r in records:
            await observer.on_record(r)
        self.assertEqual(observer.records, records[1:])

    async def test_composite_and_metrics(self):
        metrics = MetricsManager()
        history = LoggingObserver(history=1)
        composite = CompositeObserver([history, MetricsObserver(metrics)])
        record = record_for(False, False)
        await composite.on_record(record)
        self.assertEqual(history.records, [record])
        self.assertEqual(
            metrics.registry.get_sample_value("aggregate_status"),
            0.0,
        )
        self.assertIs(record.aggregate_status, AggregateStatus.ALL_DOWN)


if __name__ == "__main__":
    unittest.main()
