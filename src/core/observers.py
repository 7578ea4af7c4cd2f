import logging
from typing import List, Optional

from abstractions.observer import HealthObserver
from config.logging_config import setup_logging
from contracts.health import AggregateStatus, MonitorRecord
from core.metrics_manager import MetricsManager

setup_logging()
logger = logging.getLogger(__name__)

SUMMARY = {
    AggregateStatus.ALL_HEALTHY: "All servers healthy",
    AggregateStatus.PARTIAL: "Partial outage detected",
    AggregateStatus.ALL_DOWN: "All servers down",
}


class LoggingObserver(HealthObserver):
    """
    Logs one block per tick. Keeps the last `history` records when asked to.
    """

    def __init__(self, history: int = 0):
        self.history = history
        self.records: List[MonitorRecord] = []

    async def on_record(self, record: MonitorRecord):
        logger.info(f"=== Health Check at {record.timestamp.isoformat()} ===")
        for identifier, verdict in record.snapshot.verdicts.items():
            logger.info(f"{identifier}: {verdict.value.upper()}")
        summary = SUMMARY[record.aggregate_status]
        if record.aggregate_status is AggregateStatus.ALL_HEALTHY:
            logger.info(summary)
        elif record.aggregate_status is AggregateStatus.PARTIAL:
            logger.warning(summary)
        else:
            logger.error(summary)

        if self.history:
            self.records.append(record)
            del self.records[: -self.history]


class MetricsObserver(HealthObserver):
    def __init__(self, metrics_manager: MetricsManager):
        self.metrics_manager = metrics_manager

    async def on_record(self, record: MonitorRecord):
        self.metrics_manager.observe_record(record)


class CompositeObserver(HealthObserver):
    """Fans a record out to several observers, in order."""

    def __init__(self, observers: Optional[List[HealthObserver]] = None):
        self.observers = list(observers or [])

    async def on_record(self, record: MonitorRecord):
        for observer in self.observers:
            await observer.on_record(record)
