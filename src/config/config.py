import os


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    # Endpoint records as handed over by the infrastructure provider
    PRIMARY_ID = os.environ.get("PRIMARY_ID", "AWS")
    SECONDARY_ID = os.environ.get("SECONDARY_ID", "GCP")
    # Prefer PRIMARY_HOST if set, else fall back to the provider-style AWS_IP
    PRIMARY_HOST = os.environ.get("PRIMARY_HOST", os.environ.get("AWS_IP", ""))
    SECONDARY_HOST = os.environ.get("SECONDARY_HOST", os.environ.get("GCP_IP", ""))
    ENDPOINT_PORT = os.environ.get("ENDPOINT_PORT")
    ROOT_PATH = os.environ.get("ENDPOINT_ROOT_PATH", "/")
    HEALTH_PATH = os.environ.get("ENDPOINT_HEALTH_PATH", "/health")

    # Optional terraform output document (terraform output -json)
    ENDPOINTS_FILE = os.environ.get("ENDPOINTS_FILE")
    PRIMARY_OUTPUT_KEY = os.environ.get("PRIMARY_OUTPUT_KEY", "aws_instance_ip")
    SECONDARY_OUTPUT_KEY = os.environ.get("SECONDARY_OUTPUT_KEY", "gcp_instance_ip")

    # Symbolic aliases served by the local resolver
    DNS_DOMAIN = os.environ.get("DNS_DOMAIN", "multicloud.local")
    USE_DNS_ALIASES = _env_bool("USE_DNS_ALIASES")

    HEALTH_CONNECT_TIMEOUT = float(os.environ.get("HEALTH_CONNECT_TIMEOUT", "5"))
    HEALTH_TOTAL_TIMEOUT = float(os.environ.get("HEALTH_TOTAL_TIMEOUT", "10"))
    # Tighter budget keeps the simulated load test bounded
    LOAD_TEST_CONNECT_TIMEOUT = float(os.environ.get("LOAD_TEST_CONNECT_TIMEOUT", "3"))
    LOAD_TEST_TOTAL_TIMEOUT = float(os.environ.get("LOAD_TEST_TOTAL_TIMEOUT", "5"))

    MONITOR_INTERVAL = float(os.environ.get("MONITOR_INTERVAL", "30"))
    LOAD_TEST_REQUESTS = int(os.environ.get("LOAD_TEST_REQUESTS", "10"))
    LOAD_TEST_DELAY = float(os.environ.get("LOAD_TEST_DELAY", "0.5"))

    READY_ATTEMPTS = int(os.environ.get("READY_ATTEMPTS", "30"))
    READY_DELAY = float(os.environ.get("READY_DELAY", "10"))

    # Reference endpoint server
    ENDPOINT_ID = os.environ.get("ENDPOINT_ID", "AWS")
    ENDPOINT_HEALTHY = _env_bool("ENDPOINT_HEALTHY", "true")

    PROFILING_ENABLED = _env_bool("PROFILING_ENABLED")
