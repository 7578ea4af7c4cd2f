import unittest
from datetime import datetime, timezone

from contracts.health import AggregateStatus, HealthSnapshot, HealthVerdict, MonitorRecord
from contracts.load_test import RequestOutcome
from core.metrics_manager import MetricsManager


class TestMetricsManager(unittest.TestCase):
    def setUp(self):
        self.metrics = MetricsManager()

    def test_managers_have_separate_registries(self):
        other = MetricsManager()
        self.metrics.observe_probe("AWS", True, 0.1)
        self.assertEqual(self.metrics.get_endpoint_health("AWS"), 1.0)
        self.assertIsNone(other.get_endpoint_health("AWS"))

    def test_observe_probe(self):
        self.metrics.observe_probe("GCP", False, 0.2)
        self.assertEqual(self.metrics.get_endpoint_health("GCP"), 0.0)
        count = self.metrics.registry.get_sample_value(
            "probe_latency_seconds_count", {"endpoint": "GCP"}
        )
        self.assertEqual(count, 1.0)

    def test_observe_record(self):
        snapshot = HealthSnapshot(
            verdicts={"AWS": HealthVerdict.HEALTHY, "GCP": HealthVerdict.UNHEALTHY}
        )
        record = MonitorRecord(
            timestamp=datetime.now(timezone.utc),
            snapshot=snapshot,
            aggregate_status=AggregateStatus.PARTIAL,
        )
        self.metrics.observe_record(record)
        self.assertEqual(self.metrics.get_endpoint_health("AWS"), 1.0)
        self.assertEqual(self.metrics.get_endpoint_health("GCP"), 0.0)
        self.assertEqual(self.metrics.registry.get_sample_value("aggregate_status"), 1.0)

    def test_observe_outcome(self):
        self.metrics.observe_outcome(RequestOutcome(served_by="AWS"))
        self.metrics.observe_outcome(RequestOutcome(served_by="AWS"))
        self.metrics.observe_outcome(RequestOutcome())
        self.assertEqual(self.metrics.get_request_count("AWS"), 2.0)
        self.assertEqual(self.metrics.get_request_count("failed"), 1.0)
        self.assertEqual(self.metrics.get_request_count("GCP"), 0.0)

    def test_exposition(self):
        self.metrics.observe_probe("AWS", True, 0.01)
        self.assertIn(b'endpoint_health{endpoint="AWS"} 1.0', self.metrics.exposition())


if __name__ == "__main__":
    unittest.main()
