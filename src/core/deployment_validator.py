import asyncio
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel

from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint
from core.errors import ContentFetchFailure
from core.profiler import Profiler
from core.prober import Prober

setup_logging()
logger = logging.getLogger(__name__)

HEALTH_BODY = "OK"


class EndpointValidation(BaseModel):
    identifier: str
    page_ok: bool = False
    health_ok: bool = False
    errors: List[str] = []

    @property
    def passed(self) -> bool:
        return self.page_ok and self.health_ok


class ValidationReport(BaseModel):
    endpoints: Dict[str, EndpointValidation]

    @property
    def passed(self) -> bool:
        return all(v.passed for v in self.endpoints.values())


def banner_for(endpoint: Endpoint) -> str:
    """Text the endpoint's root page must contain to pass validation."""
    return f"{endpoint.identifier} Server Online"


def is_ok_body(body: str) -> bool:
    """The health body is `OK`, a trailing newline is tolerated."""
    return body.rstrip("\r\n") == HEALTH_BODY


class DeploymentValidator:
    """
    Content-level checks of freshly provisioned endpoints.

    Unlike the health probe, validation reads response bodies. Failures are
    reported in the returned models, never raised.
    """

    def __init__(self, prober: Prober):
        self.prober = prober

    @Profiler.profile
    async def validate_endpoint(self, endpoint: Endpoint) -> EndpointValidation:
        result = EndpointValidation(identifier=endpoint.identifier)
        try:
            page = await self.prober.fetch_content(endpoint)
            result.page_ok = banner_for(endpoint) in page
            if not result.page_ok:
                result.errors.append(f"root page does not contain '{banner_for(endpoint)}'")
        except ContentFetchFailure as e:
            result.errors.append(str(e))

        try:
            body = await self.prober.fetch_health_body(endpoint)
            result.health_ok = is_ok_body(body)
            if not result.health_ok:
                result.errors.append(f"health body was {body!r}, expected 'OK'")
        except ContentFetchFailure as e:
            result.errors.append(str(e))

        if result.passed:
            logger.info(f"{endpoint.identifier} server validation passed")
        else:
            logger.error(f"{endpoint.identifier} server validation failed: {result.errors}")
        return result

    @Profiler.profile
    async def validate(self, endpoints: List[Endpoint]) -> ValidationReport:
        results = await asyncio.gather(*(self.validate_endpoint(e) for e in endpoints))
        return ValidationReport(endpoints={r.identifier: r for r in results})

    @Profiler.profile
    async def wait_until_ready(
        self,
        endpoints: List[Endpoint],
        attempts: int = Config.READY_ATTEMPTS,
        delay: float = Config.READY_DELAY,
        sleep=asyncio.sleep,
    ) -> Dict[str, bool]:
        """
        Probe each endpoint in turn until it answers healthy or attempts run out.

        Returns:
            Dict[str, bool]: Readiness per endpoint identifier.
        """
        readiness = {}
        for endpoint in endpoints:
            readiness[endpoint.identifier] = await self._wait_for(
                endpoint, attempts, delay, sleep
            )
        return readiness

    async def _wait_for(
        self, endpoint: Endpoint, attempts: int, delay: float, sleep
    ) -> bool:
        logger.info(f"Waiting for {endpoint.identifier} server to be ready...")
        for attempt in range(1, attempts + 1):
            verdict = await self.prober.probe(endpoint)
            if verdict.is_healthy:
                logger.info(f"{endpoint.identifier} server is ready (attempt {attempt})")
                return True
            if attempt < attempts:
                await sleep(delay)
        logger.warning(
            f"{endpoint.identifier} server may not be ready after {attempts} attempts"
        )
        return False


def summarize(report: Optional[ValidationReport]) -> str:
    if report is None:
        return "no validation run"
    lines = []
    for identifier, v in report.endpoints.items():
        status = "passed" if v.passed else "FAILED"
        lines.append(f"{identifier}: {status}")
    return "\n".join(lines)
