import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx

from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint
from contracts.health import HealthVerdict
from core.errors import (
    ContentFetchFailure,
    ProbeConnectionFailure,
    ProbeError,
    ProbeTimeout,
)
from core.metrics_manager import MetricsManager
from core.profiler import Profiler

setup_logging()
logger = logging.getLogger(__name__)


class Prober:
    """
    Issues bounded-timeout HTTP checks against a single endpoint.

    Network faults never escape probe(): they are raised internally as ProbeError
    subclasses and absorbed into an UNHEALTHY verdict.
    """

    @Profiler.profile
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        connect_timeout: float = Config.HEALTH_CONNECT_TIMEOUT,
        total_timeout: float = Config.HEALTH_TOTAL_TIMEOUT,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        """
        Initialize the Prober.

        Args:
            client: Shared HTTP client. When None a short-lived client is opened per request.
            connect_timeout: Default connect timeout in seconds.
            total_timeout: Default bound on the whole request in seconds.
            metrics_manager: Optional sink for probe latency and health gauges.
        """
        self.client = client
        self.connect_timeout = connect_timeout
        self.total_timeout = total_timeout
        self.metrics_manager = metrics_manager

    @asynccontextmanager
    async def _session(self):
        if self.client is not None:
            yield self.client
        else:
            async with httpx.AsyncClient() as client:
                yield client

    async def _get(
        self,
        endpoint: Endpoint,
        url: str,
        timeout_connect: float,
        timeout_total: float,
    ) -> httpx.Response:
        """
        GET url, enforcing timeout_total over the whole exchange.

        Raises:
            ProbeTimeout: The connect or total budget ran out.
            ProbeConnectionFailure: Any other transport-level failure.
        """
        timeout = httpx.Timeout(timeout_total, connect=timeout_connect)
        try:
            async with self._session() as client:
                return await asyncio.wait_for(
                    client.get(url, timeout=timeout), timeout=timeout_total
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise ProbeTimeout(
                f"no answer from {url} within {timeout_total}s",
                endpoint_id=endpoint.identifier,
                orig_exc=e,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise ProbeConnectionFailure(
                f"request to {url} failed", endpoint_id=endpoint.identifier, orig_exc=e
            ) from e

    @Profiler.profile
    async def probe(
        self,
        endpoint: Endpoint,
        timeout_connect: Optional[float] = None,
        timeout_total: Optional[float] = None,
    ) -> HealthVerdict:
        """
        Check one endpoint's health path.

        Args:
            endpoint (Endpoint): The endpoint to check.
            timeout_connect (Optional[float]): Connect timeout, defaults to the prober's.
            timeout_total (Optional[float]): Whole-request bound, defaults to the prober's.

        Returns:
            HealthVerdict: HEALTHY iff a 2xx answer arrived within the budget.
        """
        if not endpoint.is_configured:
            logger.warning(
                f"{endpoint.display_name} has no address or identifier configured; reporting unhealthy"
            )
            return HealthVerdict.UNHEALTHY

        timeout_connect = timeout_connect or self.connect_timeout
        timeout_total = timeout_total or self.total_timeout
        start = time.perf_counter()
        try:
            resp = await self._get(
                endpoint, endpoint.health_url, timeout_connect, timeout_total
            )
            healthy = resp.is_success
            if not healthy:
                logger.warning(
                    f"Probe failed for {endpoint.identifier} ({endpoint.health_url}): status={resp.status_code}"
                )
        except ProbeError as e:
            logger.warning(f"Probe error: {e}")
            healthy = False
        elapsed = time.perf_counter() - start

        if self.metrics_manager:
            self.metrics_manager.observe_probe(endpoint.identifier, healthy, elapsed)
        logger.debug(
            f"Probe {endpoint.identifier}: healthy={healthy} in {elapsed:.3f}s"
        )
        return HealthVerdict.from_bool(healthy)

    @Profiler.profile
    async def fetch_content(
        self,
        endpoint: Endpoint,
        timeout_connect: Optional[float] = None,
        timeout_total: Optional[float] = None,
    ) -> str:
        """
        Fetch the endpoint's root page.

        Raises:
            ContentFetchFailure: The page could not be retrieved or answered non-2xx.
        """
        return await self._fetch_text(
            endpoint, endpoint.root_url, timeout_connect, timeout_total
        )

    @Profiler.profile
    async def fetch_health_body(
        self,
        endpoint: Endpoint,
        timeout_connect: Optional[float] = None,
        timeout_total: Optional[float] = None,
    ) -> str:
        """Fetch the raw health-path body for content-level validation."""
        return await self._fetch_text(
            endpoint, endpoint.health_url, timeout_connect, timeout_total
        )

    async def _fetch_text(self, endpoint, url, timeout_connect, timeout_total) -> str:
        if not endpoint.is_configured:
            raise ContentFetchFailure(
                "no address configured", endpoint_id=endpoint.identifier
            )
        try:
            resp = await self._get(
                endpoint,
                url,
                timeout_connect or self.connect_timeout,
                timeout_total or self.total_timeout,
            )
        except ProbeError as e:
            raise ContentFetchFailure(
                f"could not fetch {url}", endpoint_id=endpoint.identifier, orig_exc=e
            ) from e
        if not resp.is_success:
            raise ContentFetchFailure(
                f"{url} answered with status {resp.status_code}",
                endpoint_id=endpoint.identifier,
            )
        return resp.text
