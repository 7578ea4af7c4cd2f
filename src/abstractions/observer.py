from abc import ABC, abstractmethod

from contracts.health import MonitorRecord


class HealthObserver(ABC):
    """
    Abstract base class for consumers of monitor records. Reporting (logging,
    printing, metrics) is the observer's concern, never the monitor's.
    """

    @abstractmethod
    async def on_record(self, record: MonitorRecord):
        """
        Receive the record produced by one monitor tick.

        Args:
            record (MonitorRecord): Timestamp, snapshot and aggregate status of the tick.
        """
