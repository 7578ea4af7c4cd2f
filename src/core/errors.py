"""
Exception hierarchy for the health monitor.

Only configuration faults escape to callers. Probe and content-fetch errors are
raised inside the prober and turned into verdicts or failed outcomes there.
"""
from typing import Optional


class MultiCloudError(Exception):
    """Base class for all errors raised by this project."""


class ConfigurationError(MultiCloudError):
    """Raised when endpoint data or run parameters are missing or invalid."""


class ProbeError(MultiCloudError):
    """Base class for network faults hit while talking to one endpoint."""

    def __init__(
        self,
        message: str,
        endpoint_id: Optional[str] = None,
        orig_exc: Optional[Exception] = None,
    ):
        self.endpoint_id = endpoint_id
        self.orig_exc = orig_exc

        full_msg = message
        if endpoint_id:
            full_msg = f"[{endpoint_id}] {full_msg}"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__})"
        super().__init__(full_msg)


class ProbeTimeout(ProbeError):
    """The endpoint did not answer within the probe's time budget."""


class ProbeConnectionFailure(ProbeError):
    """The connection was refused, reset, or the host could not be resolved."""


class ContentFetchFailure(ProbeError):
    """The health probe succeeded but the root page could not be retrieved."""
