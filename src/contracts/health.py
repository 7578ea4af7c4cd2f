from datetime import datetime, timezone
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class HealthVerdict(str, Enum):
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"

    @classmethod
    def from_bool(cls, healthy: bool) -> "HealthVerdict":
        return cls.HEALTHY if healthy else cls.UNHEALTHY

    @property
    def is_healthy(self) -> bool:
        return self is HealthVerdict.HEALTHY


class AggregateStatus(str, Enum):
    ALL_HEALTHY = "AllHealthy"
    PARTIAL = "Partial"
    ALL_DOWN = "AllDown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthSnapshot(BaseModel):
    """
    Health of every known endpoint at one observation instant.

    Keys are endpoint identifiers, in the order the endpoints were probed.
    """

    verdicts: Dict[str, HealthVerdict]
    captured_at: datetime = Field(default_factory=_utcnow)

    def verdict_for(self, identifier: str) -> HealthVerdict:
        return self.verdicts[identifier]

    def healthy_endpoints(self):
        return [i for i, v in self.verdicts.items() if v.is_healthy]

    @property
    def aggregate_status(self) -> AggregateStatus:
        return aggregate_status(self)


def aggregate_status(snapshot: HealthSnapshot) -> AggregateStatus:
    """
    Derive the system-wide status from a snapshot.

    An empty snapshot has nothing healthy in it and reports ALL_DOWN.
    """
    verdicts = list(snapshot.verdicts.values())
    if verdicts and all(v.is_healthy for v in verdicts):
        return AggregateStatus.ALL_HEALTHY
    if not any(v.is_healthy for v in verdicts):
        return AggregateStatus.ALL_DOWN
    return AggregateStatus.PARTIAL


class MonitorRecord(BaseModel):
    """
    Structured record emitted by the monitor on every tick.
    """

    timestamp: datetime
    snapshot: HealthSnapshot
    aggregate_status: AggregateStatus
