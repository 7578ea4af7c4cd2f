import asyncio
import logging
from typing import Optional

from abstractions.selection_policy import SelectionPolicy
from algorithms.round_robin_policy import AlternatingPreferencePolicy
from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import EndpointPair
from contracts.load_test import LoadTestResult
from core.balancer import Balancer
from core.errors import ConfigurationError
from core.metrics_manager import MetricsManager
from core.profiler import Profiler

setup_logging()
logger = logging.getLogger(__name__)


class LoadSimulator:
    """
    Drives a bounded number of simulated requests through the balancer and
    tallies which endpoint served each one.
    """

    @Profiler.profile
    def __init__(
        self,
        balancer: Balancer,
        policy: Optional[SelectionPolicy] = None,
        request_delay: float = Config.LOAD_TEST_DELAY,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        """
        Initialize the LoadSimulator.

        Args:
            balancer (Balancer): Selects the serving endpoint per request.
            policy (Optional[SelectionPolicy]): Preference ordering, alternating by default.
            request_delay (float): Pause between requests in seconds, 0 disables pacing.
            metrics_manager (Optional[MetricsManager]): Counts outcomes when given.
        """
        if request_delay < 0:
            raise ConfigurationError(f"Request delay must be >= 0, got {request_delay}")
        self.balancer = balancer
        self.policy = policy or AlternatingPreferencePolicy()
        self.request_delay = request_delay
        self.metrics_manager = metrics_manager
        self._sleep = asyncio.sleep

    @Profiler.profile
    async def run(self, endpoints: EndpointPair, request_count: int) -> LoadTestResult:
        """
        Simulate request_count requests.

        Args:
            endpoints (EndpointPair): Primary and secondary endpoints.
            request_count (int): Number of requests, at least 1.

        Returns:
            LoadTestResult: Per-endpoint counts, failures and the success rate.
        """
        if request_count < 1:
            raise ConfigurationError(f"Request count must be >= 1, got {request_count}")

        logger.info(f"Simulating load balancer with {request_count} requests")
        result = LoadTestResult()
        for i in range(1, request_count + 1):
            order = self.policy.preference_order(i, endpoints)
            outcome = await self.balancer.select_endpoint(order, index=i)
            result.record(outcome)
            if self.metrics_manager:
                self.metrics_manager.observe_outcome(outcome)
            logger.info(f"Request {i}: {outcome.label}")

            if self.request_delay and i < request_count:
                await self._sleep(self.request_delay)

        result.finalize()
        logger.info(
            f"Load test finished: counts={result.counts} failed={result.failed} "
            f"success_rate={result.success_rate}%"
        )
        return result
