import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from config.logging_config import setup_logging
from contracts.health import AggregateStatus, MonitorRecord
from contracts.load_test import RequestOutcome
from core.profiler import Profiler

setup_logging()
logger = logging.getLogger(__name__)

STATUS_CODES = {
    AggregateStatus.ALL_HEALTHY: 2,
    AggregateStatus.PARTIAL: 1,
    AggregateStatus.ALL_DOWN: 0,
}


class MetricsManager:
    """
    Manager for exporting endpoint health and load-test outcomes as Prometheus metrics.
    """

    @Profiler.profile
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the MetricsManager and set up Prometheus metrics.

        Args:
            registry: Collector registry to register metrics on. Each manager gets
                its own registry by default so several managers can coexist in one
                process (tests, the endpoint server and the CLI).
        """
        self.registry = registry or CollectorRegistry()
        self.ENDPOINT_HEALTH = Gauge(
            "endpoint_health",
            "1 if the endpoint answered its last health probe, else 0",
            ["endpoint"],
            registry=self.registry,
        )
        self.AGGREGATE_STATUS = Gauge(
            "aggregate_status",
            "2 = all healthy, 1 = partial outage, 0 = all down",
            registry=self.registry,
        )
        self.PROBE_LATENCY = Histogram(
            "probe_latency_seconds",
            "Health probe latency in seconds",
            ["endpoint"],
            registry=self.registry,
        )
        self.LOAD_TEST_REQUESTS = Counter(
            "load_test_requests",
            "Simulated requests by outcome",
            ["outcome"],
            registry=self.registry,
        )
        logger.info("MetricsManager initialized.")

    def observe_probe(self, endpoint_id: str, healthy: bool, elapsed: float):
        self.ENDPOINT_HEALTH.labels(endpoint=endpoint_id).set(1 if healthy else 0)
        self.PROBE_LATENCY.labels(endpoint=endpoint_id).observe(elapsed)

    def observe_record(self, record: MonitorRecord):
        for endpoint_id, verdict in record.snapshot.verdicts.items():
            self.ENDPOINT_HEALTH.labels(endpoint=endpoint_id).set(
                1 if verdict.is_healthy else 0
            )
        self.AGGREGATE_STATUS.set(STATUS_CODES[record.aggregate_status])

    def observe_outcome(self, outcome: RequestOutcome):
        outcome_label = "failed" if outcome.failed else outcome.served_by
        self.LOAD_TEST_REQUESTS.labels(outcome=outcome_label).inc()

    def get_endpoint_health(self, endpoint_id: str) -> Optional[float]:
        return self.registry.get_sample_value(
            "endpoint_health", {"endpoint": endpoint_id}
        )

    def get_request_count(self, outcome: str) -> float:
        value = self.registry.get_sample_value(
            "load_test_requests_total", {"outcome": outcome}
        )
        return value or 0.0

    def exposition(self) -> bytes:
        return generate_latest(self.registry)

    def serve(self, port: int, addr: str = "0.0.0.0"):
        """Expose the registry over HTTP on a background thread."""
        start_http_server(port, addr=addr, registry=self.registry)
        logger.info(f"Metrics exposed on http://{addr}:{port}/metrics")
