import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    generate_latest,
)

from config.config import Config
from config.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{identifier} Server</title></head>
<body>
<h1>{identifier} Server Online</h1>
<p>Served by the {identifier} endpoint of the multi-cloud deployment.</p>
</body>
</html>
"""


def create_app(identifier: Optional[str] = None, healthy: Optional[bool] = None) -> FastAPI:
    """
    Build a web endpoint that honours the health wire contract.

    GET / returns a page containing "<identifier> Server Online", GET /health
    returns "OK" while app.state.healthy is true and 503 otherwise.
    """
    identifier = identifier or Config.ENDPOINT_ID
    app = FastAPI()
    app.state.identifier = identifier
    app.state.healthy = Config.ENDPOINT_HEALTHY if healthy is None else healthy

    registry = CollectorRegistry()
    requests_served = Counter(
        "endpoint_requests",
        "Requests served by this endpoint",
        ["path", "status"],
        registry=registry,
    )

    @app.get("/", response_class=HTMLResponse)
    async def read_root(request: Request):
        requests_served.labels(path="/", status="200").inc()
        return HTMLResponse(
            PAGE_TEMPLATE.format(identifier=request.app.state.identifier),
            headers={"X-Endpoint-Id": request.app.state.identifier},
        )

    @app.get("/health", response_class=PlainTextResponse)
    async def health(request: Request):
        if not request.app.state.healthy:
            requests_served.labels(path="/health", status="503").inc()
            logger.info(f"health requested from {identifier}: reporting unavailable")
            return PlainTextResponse("UNAVAILABLE\n", status_code=503)
        requests_served.labels(path="/health", status="200").inc()
        return PlainTextResponse(
            "OK\n", headers={"X-Endpoint-Id": request.app.state.identifier}
        )

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    logger.info(f"Endpoint server for {identifier} created (healthy={app.state.healthy})")
    return app


app = create_app()
