"""
Builds the immutable endpoint pair from provisioning output.
"""
import json
import logging
from typing import Any, Dict, Optional

from config.config import Config
from config.logging_config import setup_logging
from contracts.endpoint import Endpoint, EndpointPair
from core.errors import ConfigurationError

setup_logging()
logger = logging.getLogger(__name__)


def read_terraform_outputs(path: str) -> Dict[str, str]:
    """
    Read a `terraform output -json` document into a flat name -> value mapping.

    Both the terraform shape ({"name": {"value": ...}}) and a plain
    {"name": value} mapping are accepted.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Endpoints file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Endpoints file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Endpoints file {path} must contain a JSON object")

    outputs = {}
    for name, entry in data.items():
        value: Any = entry.get("value") if isinstance(entry, dict) else entry
        if value is not None:
            outputs[name] = str(value)
    return outputs


def alias_for(identifier: str, domain: str = Config.DNS_DOMAIN) -> str:
    """Return the symbolic hostname the local resolver maps to an endpoint."""
    return f"{identifier.lower()}.{domain}"


def load_endpoints(
    primary_host: Optional[str] = None,
    secondary_host: Optional[str] = None,
    endpoints_file: Optional[str] = None,
    use_aliases: Optional[bool] = None,
    primary_id: str = Config.PRIMARY_ID,
    secondary_id: str = Config.SECONDARY_ID,
    port: Optional[int] = None,
) -> EndpointPair:
    """
    Build the endpoint pair.

    Hosts are taken from the explicit arguments first, then from the terraform
    output file, then from the environment. A host that cannot be found is left
    empty: the endpoint then reports unhealthy and the service entry points
    raise ConfigurationError before touching the network.

    Raises:
        ConfigurationError: The endpoints file is missing or malformed.
    """
    endpoints_file = endpoints_file or Config.ENDPOINTS_FILE
    use_aliases = Config.USE_DNS_ALIASES if use_aliases is None else use_aliases
    if port is None and Config.ENDPOINT_PORT:
        port = int(Config.ENDPOINT_PORT)

    file_outputs: Dict[str, str] = {}
    if endpoints_file:
        file_outputs = read_terraform_outputs(endpoints_file)
        logger.info(f"Loaded provisioning outputs from {endpoints_file}")

    hosts = [
        (
            primary_id,
            primary_host
            or file_outputs.get(Config.PRIMARY_OUTPUT_KEY)
            or Config.PRIMARY_HOST,
        ),
        (
            secondary_id,
            secondary_host
            or file_outputs.get(Config.SECONDARY_OUTPUT_KEY)
            or Config.SECONDARY_HOST,
        ),
    ]
    if use_aliases:
        hosts = [(identifier, alias_for(identifier)) for identifier, _ in hosts]

    endpoints = [
        Endpoint(
            identifier=identifier,
            host=(host or "").strip(),
            port=port,
            root_path=Config.ROOT_PATH,
            health_path=Config.HEALTH_PATH,
        )
        for identifier, host in hosts
    ]
    for endpoint in endpoints:
        if endpoint.is_configured:
            logger.info(f"{endpoint.identifier} server: {endpoint.host}")
        else:
            logger.error(f"Could not determine the {endpoint.display_name} server address")
    return EndpointPair(primary=endpoints[0], secondary=endpoints[1])
