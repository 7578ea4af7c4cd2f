import asyncio
import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from abstractions.observer import HealthObserver
from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint
from contracts.health import MonitorRecord, aggregate_status
from core.errors import ConfigurationError
from core.health_classifier import HealthClassifier
from core.profiler import Profiler

setup_logging()
logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    IDLE = "Idle"
    RUNNING = "Running"


class Monitor:
    """
    Periodically classifies endpoint health and hands each record to an observer.
    """

    def __init__(
        self,
        classifier: HealthClassifier,
        endpoints: Iterable[Endpoint],
        observer: Optional[HealthObserver] = None,
    ):
        """
        Initialize the Monitor.

        Args:
            classifier (HealthClassifier): Produces one snapshot per tick.
            endpoints (Iterable[Endpoint]): Endpoints to watch, in declaration order.
            observer (Optional[HealthObserver]): Receives every MonitorRecord.
        """
        self.classifier = classifier
        self.endpoints: List[Endpoint] = list(endpoints)
        self.observer = observer
        self.last_record: Optional[MonitorRecord] = None
        self.ticks = 0
        self._state = MonitorState.IDLE
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        logger.info(
            f"Monitor initialized for {[e.identifier for e in self.endpoints]}"
        )

    @property
    def state(self) -> MonitorState:
        return self._state

    @staticmethod
    def validate_interval(interval: float) -> float:
        if interval is None or not interval > 0 or not math.isfinite(interval):
            raise ConfigurationError(
                f"Monitor interval must be a finite number > 0, got {interval}"
            )
        return float(interval)

    @staticmethod
    def validate_max_ticks(max_ticks: Optional[int]) -> Optional[int]:
        if max_ticks is not None and max_ticks < 1:
            raise ConfigurationError(f"Tick limit must be >= 1, got {max_ticks}")
        return max_ticks

    @Profiler.profile
    async def tick(self) -> MonitorRecord:
        """
        Run one probe cycle and emit its record.
        """
        snapshot = await self.classifier.classify(self.endpoints)
        record = MonitorRecord(
            timestamp=datetime.now(timezone.utc),
            snapshot=snapshot,
            aggregate_status=aggregate_status(snapshot),
        )
        self.last_record = record
        self.ticks += 1
        if self.observer:
            try:
                await self.observer.on_record(record)
            except Exception as e:
                logger.exception(f"Observer failed to handle monitor record: {e}")
        return record

    async def run(
        self, interval: float = Config.MONITOR_INTERVAL, max_ticks: Optional[int] = None
    ):
        """
        Loop until stop() is called, the task is cancelled, or max_ticks ticks ran.

        Stop requests are honoured between ticks: an in-flight probe cycle always
        finishes (or times out on its own bound) first, while the wait between
        ticks ends as soon as stop() is called.
        """
        interval = self._begin(interval, max_ticks)
        await self._loop(interval, max_ticks)

    def _begin(self, interval: float, max_ticks: Optional[int]) -> float:
        interval = self.validate_interval(interval)
        self.validate_max_ticks(max_ticks)
        if self._state is MonitorState.RUNNING:
            raise RuntimeError("Monitor is already running")

        self._stop_event.clear()
        self._state = MonitorState.RUNNING
        return interval

    async def _loop(self, interval: float, max_ticks: Optional[int]):
        logger.info(f"Starting health monitoring (interval: {interval}s)")
        ticks = 0
        try:
            while not self._stop_event.is_set():
                await self.tick()
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._state = MonitorState.IDLE
            logger.info(f"Health monitoring stopped after {ticks} tick(s)")

    async def start(
        self, interval: float = Config.MONITOR_INTERVAL, max_ticks: Optional[int] = None
    ) -> asyncio.Task:
        """
        Start the monitor loop as an asynchronous task.

        The monitor is RUNNING when this returns, so a stop() issued before the
        task first runs still ends the loop.
        """
        interval = self._begin(interval, max_ticks)
        self._task = asyncio.create_task(self._loop(interval, max_ticks))
        self._task.add_done_callback(self._on_task_done)
        return self._task

    def _on_task_done(self, task: asyncio.Task):
        # A task cancelled before its first step never reaches _loop's finally
        self._state = MonitorState.IDLE

    def stop(self):
        """
        Request the loop to halt at the next tick boundary.
        """
        self._stop_event.set()
        logger.info("Monitor stop requested.")

    async def wait(self):
        if self._task:
            await self._task
