#!/usr/bin/env python3
"""Command line wrapper around the multi-cloud health service.

Commands:
 - check (alias: health): one health snapshot of both endpoints
 - monitor [interval]: continuous monitoring until Ctrl+C
 - load-test (alias: lb) [count]: simulated round-robin load with failover
 - serve: fetch the page from an available endpoint
 - urls: print endpoint URLs
 - validate: content-level deployment validation
 - wait: wait for both endpoints to become healthy

Exit codes: 0 success, 2 no healthy endpoint, 3 configuration error,
4 validation failed.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from config.config import Config
from config.logging_config import set_level, setup_logging
from contracts.health import AggregateStatus
from core.deployment_validator import summarize
from core.endpoint_loader import load_endpoints
from core.errors import ConfigurationError
from core.health_service import HealthService
from core.metrics_manager import MetricsManager
from core.observers import CompositeObserver, LoggingObserver, MetricsObserver

setup_logging()
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_HEALTHY_ENDPOINT = 2
EXIT_CONFIGURATION_ERROR = 3
EXIT_VALIDATION_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multicloud-health", description="Multi-cloud health check tool"
    )
    parser.add_argument("--primary-host", help="Address of the primary (AWS) endpoint")
    parser.add_argument("--secondary-host", help="Address of the secondary (GCP) endpoint")
    parser.add_argument("--endpoints-file", help="terraform output -json document")
    parser.add_argument(
        "--use-aliases",
        action="store_true",
        default=None,
        help=f"Address endpoints by their {Config.DNS_DOMAIN} aliases",
    )
    parser.add_argument("--port", type=int, help="Port of both endpoints")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("check", aliases=["health"], help="Single health check of both servers")

    monitor = sub.add_parser("monitor", help="Continuous health monitoring")
    monitor.add_argument("interval", nargs="?", type=float, default=Config.MONITOR_INTERVAL)
    monitor.add_argument("--count", type=int, help="Stop after this many checks")
    monitor.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on this port")

    load_test = sub.add_parser("load-test", aliases=["lb"], help="Simulate the load balancer")
    load_test.add_argument("count", nargs="?", type=int, default=Config.LOAD_TEST_REQUESTS)
    load_test.add_argument(
        "--delay",
        dest="request_delay",
        type=float,
        default=Config.LOAD_TEST_DELAY,
        help="Pause between requests",
    )

    serve = sub.add_parser("serve", help="Get page from available server")
    serve.add_argument(
        "--prefer-primary", action="store_true", help="Try the primary endpoint first"
    )

    sub.add_parser("urls", help="Show server URLs")
    sub.add_parser("validate", help="Validate page and health content")

    wait = sub.add_parser("wait", help="Wait until both servers answer healthy")
    wait.add_argument("--attempts", type=int, default=Config.READY_ATTEMPTS)
    wait.add_argument("--delay", type=float, default=Config.READY_DELAY)
    return parser


def _emit(args, payload, text: str):
    if args.json:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


async def run_command(args, service: HealthService) -> int:
    command = args.command or "check"

    if command in ("check", "health"):
        snapshot = await service.check()
        lines = [f"{i}: {v.value.upper()}" for i, v in snapshot.verdicts.items()]
        _emit(args, snapshot.model_dump(mode="json"), "\n".join(lines))
        if snapshot.aggregate_status is AggregateStatus.ALL_DOWN:
            return EXIT_NO_HEALTHY_ENDPOINT
        return EXIT_OK

    if command == "monitor":
        observers = [LoggingObserver()]
        if args.metrics_port:
            service.metrics_manager.serve(args.metrics_port)
            observers.append(MetricsObserver(service.metrics_manager))
        print("Press Ctrl+C to stop")
        await service.monitor(
            args.interval,
            observer=CompositeObserver(observers),
            max_ticks=args.count,
            handle_signals=True,
        )
        return EXIT_OK

    if command in ("load-test", "lb"):
        result = await service.load_test(args.count)
        lines = ["=== Load Balancing Results ==="]
        for identifier in (e.identifier for e in service.endpoints.as_list()):
            lines.append(f"{identifier} requests: {result.count_for(identifier)}")
        lines.append(f"Failed requests: {result.failed}")
        lines.append(f"Success rate: {result.success_rate}%")
        payload = result.model_dump(mode="json", exclude={"outcomes"})
        payload["success_rate"] = result.success_rate
        _emit(args, payload, "\n".join(lines))
        return EXIT_OK if result.succeeded else EXIT_NO_HEALTHY_ENDPOINT

    if command == "serve":
        outcome = await service.serve(prefer_primary=args.prefer_primary)
        if outcome.failed:
            _emit(args, outcome.model_dump(mode="json"), "No healthy servers available")
            return EXIT_NO_HEALTHY_ENDPOINT
        _emit(args, outcome.model_dump(mode="json"), outcome.content)
        return EXIT_OK

    if command == "urls":
        urls = service.urls()
        lines = []
        for identifier, entry in urls.items():
            lines.append(f"{identifier}: {entry['url']}")
            lines.append(f"{identifier} Health: {entry['health']}")
        _emit(args, urls, "\n".join(lines))
        return EXIT_OK

    if command == "validate":
        report = await service.validate()
        _emit(args, report.model_dump(mode="json"), summarize(report))
        return EXIT_OK if report.passed else EXIT_VALIDATION_FAILED

    if command == "wait":
        readiness = await service.wait_until_ready(args.attempts, args.delay)
        lines = [f"{i}: {'ready' if ok else 'NOT READY'}" for i, ok in readiness.items()]
        _emit(args, readiness, "\n".join(lines))
        return EXIT_OK if all(readiness.values()) else EXIT_NO_HEALTHY_ENDPOINT

    raise ConfigurationError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_level(args.log_level)

    try:
        endpoints = load_endpoints(
            primary_host=args.primary_host,
            secondary_host=args.secondary_host,
            endpoints_file=args.endpoints_file,
            use_aliases=args.use_aliases,
            port=args.port,
        )
        service = HealthService(
            endpoints,
            metrics_manager=MetricsManager(),
            request_delay=getattr(args, "request_delay", Config.LOAD_TEST_DELAY),
        )
        return asyncio.run(run_command(args, service))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
