import asyncio
import logging
from typing import Iterable, Optional

from config.logging_config import setup_logging
from contracts.endpoint import Endpoint
from contracts.health import HealthSnapshot
from core.errors import ConfigurationError
from core.profiler import Profiler
from core.prober import Prober

setup_logging()
logger = logging.getLogger(__name__)


class HealthClassifier:
    """
    Probes every known endpoint and assembles a complete HealthSnapshot.
    """

    @Profiler.profile
    def __init__(
        self,
        prober: Prober,
        timeout_connect: Optional[float] = None,
        timeout_total: Optional[float] = None,
    ):
        self.prober = prober
        self.timeout_connect = timeout_connect
        self.timeout_total = timeout_total

    @Profiler.profile
    async def classify(self, endpoints: Iterable[Endpoint]) -> HealthSnapshot:
        """
        Probe all endpoints concurrently and return one verdict per endpoint.

        Each probe keeps its own timeout, so a slow endpoint cannot extend the
        other's budget. The snapshot is built only after every probe returned.

        Args:
            endpoints: Endpoints in declaration order.

        Returns:
            HealthSnapshot: Verdicts keyed by identifier, in declaration order.
        """
        endpoints = list(endpoints)
        identifiers = [e.identifier for e in endpoints]
        if len(set(identifiers)) != len(identifiers):
            raise ConfigurationError(f"Endpoint identifiers must be unique: {identifiers}")

        verdicts = await asyncio.gather(
            *(
                self.prober.probe(e, self.timeout_connect, self.timeout_total)
                for e in endpoints
            )
        )
        snapshot = HealthSnapshot(verdicts=dict(zip(identifiers, verdicts)))
        logger.info(
            "Health snapshot: "
            + ", ".join(f"{i}={v.value}" for i, v in snapshot.verdicts.items())
        )
        return snapshot

