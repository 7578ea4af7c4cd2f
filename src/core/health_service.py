import asyncio
import logging
import signal
from typing import Dict, Optional

import httpx

from abstractions.observer import HealthObserver
from abstractions.selection_policy import SelectionPolicy
from algorithms.fixed_preference_policy import FixedPreferencePolicy
from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import EndpointPair
from contracts.health import HealthSnapshot
from contracts.load_test import LoadTestResult, RequestOutcome
from core.balancer import Balancer
from core.deployment_validator import DeploymentValidator, ValidationReport
from core.errors import ConfigurationError
from core.health_classifier import HealthClassifier
from core.load_simulator import LoadSimulator
from core.metrics_manager import MetricsManager
from core.monitor import Monitor
from core.observers import LoggingObserver
from core.prober import Prober

setup_logging()
logger = logging.getLogger(__name__)


class HealthService:
    """
    Entry points used by the command line wrapper.

    Wires the prober, classifier, monitor, balancer and load simulator around
    one immutable endpoint pair.
    """

    def __init__(
        self,
        endpoints: EndpointPair,
        client: Optional[httpx.AsyncClient] = None,
        metrics_manager: Optional[MetricsManager] = None,
        request_delay: float = Config.LOAD_TEST_DELAY,
        policy: Optional[SelectionPolicy] = None,
    ):
        self.endpoints = endpoints
        self.metrics_manager = metrics_manager
        self.prober = Prober(client=client, metrics_manager=metrics_manager)
        self.classifier = HealthClassifier(
            self.prober,
            timeout_connect=Config.HEALTH_CONNECT_TIMEOUT,
            timeout_total=Config.HEALTH_TOTAL_TIMEOUT,
        )
        self.balancer = Balancer(self.prober)
        self.load_simulator = LoadSimulator(
            self.balancer,
            policy=policy,
            request_delay=request_delay,
            metrics_manager=metrics_manager,
        )
        self.validator = DeploymentValidator(self.prober)

    def require_configured(self):
        """
        Raises:
            ConfigurationError: An endpoint has no address or identifier.
        """
        missing = self.endpoints.missing()
        if missing:
            names = ", ".join(e.display_name for e in missing)
            raise ConfigurationError(
                f"Missing address or identifier for endpoint(s): {names}. "
                "Make sure provisioning completed and its outputs are available."
            )

    async def check(self) -> HealthSnapshot:
        self.require_configured()
        return await self.classifier.classify(self.endpoints.as_list())

    def create_monitor(self, observer: Optional[HealthObserver] = None) -> Monitor:
        return Monitor(
            self.classifier,
            self.endpoints.as_list(),
            observer=observer or LoggingObserver(),
        )

    async def monitor(
        self,
        interval: float = Config.MONITOR_INTERVAL,
        observer: Optional[HealthObserver] = None,
        max_ticks: Optional[int] = None,
        handle_signals: bool = False,
    ) -> Monitor:
        """
        Run the monitor until it is stopped, cancelled, or max_ticks is reached.

        With handle_signals, SIGINT and SIGTERM stop the loop at the next tick
        boundary.
        """
        Monitor.validate_interval(interval)
        Monitor.validate_max_ticks(max_ticks)
        self.require_configured()
        monitor = self.create_monitor(observer)

        installed = []
        if handle_signals:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, monitor.stop)
                    installed.append(sig)
                except NotImplementedError:
                    logger.debug(f"Signal handler for {sig.name} not supported here")
        try:
            await monitor.run(interval, max_ticks=max_ticks)
        finally:
            for sig in installed:
                asyncio.get_running_loop().remove_signal_handler(sig)
        return monitor

    async def load_test(self, count: int = Config.LOAD_TEST_REQUESTS) -> LoadTestResult:
        self.require_configured()
        return await self.load_simulator.run(self.endpoints, count)

    async def serve(self, prefer_primary: bool = False) -> RequestOutcome:
        """
        Serve one request from the preferred endpoint, failing over to the other.
        """
        self.require_configured()
        order = FixedPreferencePolicy(prefer_primary).preference_order(1, self.endpoints)
        return await self.balancer.serve(order, index=1)

    def urls(self) -> Dict[str, Dict[str, str]]:
        self.require_configured()
        return {
            e.identifier: {"url": e.root_url, "health": e.health_url}
            for e in self.endpoints.as_list()
        }

    async def validate(self) -> ValidationReport:
        self.require_configured()
        return await self.validator.validate(self.endpoints.as_list())

    async def wait_until_ready(
        self, attempts: int = Config.READY_ATTEMPTS, delay: float = Config.READY_DELAY
    ) -> Dict[str, bool]:
        self.require_configured()
        return await self.validator.wait_until_ready(
            self.endpoints.as_list(), attempts=attempts, delay=delay
        )
