from typing import Dict, List, Optional

from pydantic import BaseModel, Field

FAILED = "FAILED"


class RequestOutcome(BaseModel):
    """
    Result of one simulated request: the endpoint that served it, or a failure.
    """

    index: int = 0
    preferred: Optional[str] = None
    served_by: Optional[str] = None
    failed_over: bool = False
    content: Optional[str] = None
    probes: int = 0

    @property
    def failed(self) -> bool:
        return self.served_by is None

    @property
    def label(self) -> str:
        if self.failed:
            return FAILED
        if self.failed_over:
            return f"{self.served_by} (fallback)"
        return self.served_by


class LoadTestResult(BaseModel):
    """
    Running totals of a load simulation.

    Created before the first request, updated once per request through record(),
    and finalised when the run ends.
    """

    total: int = 0
    counts: Dict[str, int] = Field(default_factory=dict)
    failed: int = 0
    fallbacks: int = 0
    outcomes: List[RequestOutcome] = Field(default_factory=list)
    finalized: bool = False

    def record(self, outcome: RequestOutcome):
        self.total += 1
        self.outcomes.append(outcome)
        if outcome.failed:
            self.failed += 1
            return
        self.counts[outcome.served_by] = self.counts.get(outcome.served_by, 0) + 1
        if outcome.failed_over:
            self.fallbacks += 1

    def finalize(self) -> "LoadTestResult":
        self.finalized = True
        return self

    def count_for(self, identifier: str) -> int:
        return self.counts.get(identifier, 0)

    @property
    def succeeded(self) -> int:
        return self.total - self.failed

    @property
    def success_rate(self) -> int:
        """
        Percentage of served requests, truncated to an integer.
        """
        if self.total == 0:
            return 0
        return success_rate(self.total, self.failed)


def success_rate(total: int, failed: int) -> int:
    return (total - failed) * 100 // total
