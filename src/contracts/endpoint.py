from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from core.errors import ConfigurationError


class Endpoint(BaseModel):
    """
    Data model representing one deployed web server.

    Endpoints are built once from the infrastructure provider's output and never
    mutated afterwards. An empty host or identifier means the provider did not
    supply that field; such an endpoint is never probed.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    host: str = ""
    port: Optional[int] = None
    root_path: str = "/"
    health_path: str = "/health"

    @property
    def is_configured(self) -> bool:
        return bool(self.identifier.strip() and self.host.strip())

    @property
    def display_name(self) -> str:
        return self.identifier.strip() or "<unnamed>"

    @property
    def base_url(self) -> str:
        """
        Return the scheme://host[:port] prefix used for every request to this endpoint.
        """
        host = self.host.strip().rstrip("/")
        if not host.startswith(("http://", "https://")):
            host = f"http://{host}"
        if self.port is not None:
            host = f"{host}:{self.port}"
        return host

    @property
    def health_url(self) -> str:
        return f"{self.base_url}/{self.health_path.lstrip('/')}"

    @property
    def root_url(self) -> str:
        return f"{self.base_url}/{self.root_path.lstrip('/')}"

    def __repr__(self):
        return f"Endpoint(identifier={self.identifier}, host={self.host or '<missing>'})"


class EndpointPair(BaseModel):
    """
    The two endpoints of the reference deployment, in primary/secondary order.
    """

    model_config = ConfigDict(frozen=True)

    primary: Endpoint
    secondary: Endpoint

    @model_validator(mode="after")
    def _distinct_identifiers(self):
        # Blank identifiers are reported by missing() instead
        identifier = self.primary.identifier.strip()
        if identifier and identifier == self.secondary.identifier.strip():
            raise ConfigurationError(
                f"Primary and secondary endpoints share the identifier {identifier!r}"
            )
        return self

    def as_list(self) -> List[Endpoint]:
        return [self.primary, self.secondary]

    def missing(self) -> List[Endpoint]:
        """Return the endpoints lacking a usable host address or identifier."""
        return [e for e in self.as_list() if not e.is_configured]
