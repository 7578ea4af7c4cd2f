import logging
from typing import Optional, Sequence, Tuple

from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint
from contracts.load_test import RequestOutcome
from core.errors import ConfigurationError, ContentFetchFailure
from core.profiler import Profiler
from core.prober import Prober

setup_logging()
logger = logging.getLogger(__name__)


class Balancer:
    """
    Picks the endpoint that serves one logical request, failing over along a
    preference order.
    """

    @Profiler.profile
    def __init__(
        self,
        prober: Prober,
        timeout_connect: float = Config.LOAD_TEST_CONNECT_TIMEOUT,
        timeout_total: float = Config.LOAD_TEST_TOTAL_TIMEOUT,
    ):
        """
        Initialize the Balancer.

        Args:
            prober (Prober): Prober used for health checks and content fetches.
            timeout_connect (float): Connect timeout of the selection probes.
            timeout_total (float): Whole-request bound of the selection probes.
        """
        self.prober = prober
        self.timeout_connect = timeout_connect
        self.timeout_total = timeout_total
        logger.info(
            f"Balancer initialized with probe budget {timeout_connect}s/{timeout_total}s"
        )

    @Profiler.profile
    async def select_endpoint(
        self, preference_order: Sequence[Endpoint], index: int = 0
    ) -> RequestOutcome:
        """
        Return the first candidate that answers its health probe.

        Every candidate is probed at most once, in order, so an all-down order
        costs exactly len(preference_order) probes.

        Args:
            preference_order: All known endpoints, most preferred first.
            index: Request index recorded on the outcome.

        Returns:
            RequestOutcome: served_by is the selected identifier, or None when
            every candidate was unhealthy.
        """
        outcome, _ = await self._select(preference_order, index)
        return outcome

    async def _select(
        self, preference_order: Sequence[Endpoint], index: int
    ) -> Tuple[RequestOutcome, Optional[Endpoint]]:
        if not preference_order:
            raise ConfigurationError("Preference order must contain at least one endpoint")

        preferred = preference_order[0]
        probes = 0
        for candidate in preference_order:
            probes += 1
            verdict = await self.prober.probe(
                candidate, self.timeout_connect, self.timeout_total
            )
            if verdict.is_healthy:
                failed_over = probes > 1
                if failed_over:
                    logger.info(
                        f"{preferred.identifier} unavailable, failing over to {candidate.identifier}"
                    )
                outcome = RequestOutcome(
                    index=index,
                    preferred=preferred.identifier,
                    served_by=candidate.identifier,
                    failed_over=failed_over,
                    probes=probes,
                )
                return outcome, candidate

        logger.warning(
            f"No healthy endpoint among {[e.identifier for e in preference_order]}"
        )
        return RequestOutcome(index=index, preferred=preferred.identifier, probes=probes), None

    @Profiler.profile
    async def serve(
        self, preference_order: Sequence[Endpoint], index: int = 0
    ) -> RequestOutcome:
        """
        Select an endpoint and fetch its root page.

        The health probe and the page fetch are separate requests. If the page
        fetch fails after a healthy probe the request is reported as failed;
        it is not retried on the next candidate.
        """
        outcome, selected = await self._select(preference_order, index)
        if selected is None:
            return outcome

        try:
            content = await self.prober.fetch_content(selected)
        except ContentFetchFailure as e:
            logger.error(f"Content fetch failed after healthy probe: {e}")
            return outcome.model_copy(update={"served_by": None, "failed_over": False})

        logger.info(f"Serving from {selected.identifier} server ({selected.host})")
        return outcome.model_copy(update={"content": content})
