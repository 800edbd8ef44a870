#!/usr/bin/env python3
"""
Puppet Last Run Exporter - Prometheus exporter for last_run_summary.yaml
Re-reads the summary on every scrape and serves the resource counts as
gauges, together with a static build info metric.
"""
import sys
import argparse
from typing import List, Optional

from prometheus_client import CollectorRegistry

from puppet_exporter.config.settings import settings
from puppet_exporter.common.logging_config import setup_logging
from puppet_exporter.common.correlation import set_component
from puppet_exporter.common.exceptions import ConfigurationError, ListenerBindFailure
from puppet_exporter.monitoring.build_info import register_build_info, version_string
from puppet_exporter.monitoring.collector import LastRunCollector
from puppet_exporter.monitoring.server import ExporterServer

logger = setup_logging(__name__, level=settings.logging.level)

set_component("exporter")


def build_registry(report_path: str) -> CollectorRegistry:
    """
    Create a registry holding the last run collector and build info.

    Each call returns an independent registry, so several exporters can
    coexist in one process.
    """
    registry = CollectorRegistry()
    registry.register(LastRunCollector(report_path))
    register_build_info(registry)
    return registry


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Puppet Last Run Exporter - expose last_run_summary.yaml as Prometheus metrics"
    )
    parser.add_argument(
        "--telemetry.address",
        dest="telemetry_address",
        default=settings.telemetry.address,
        help=f"Address on which to expose metrics (default: {settings.telemetry.address})"
    )
    parser.add_argument(
        "--telemetry.endpoint",
        dest="telemetry_endpoint",
        default=settings.telemetry.endpoint,
        help=f"Path under which to expose metrics (default: {settings.telemetry.endpoint})"
    )
    parser.add_argument(
        "--report.path",
        dest="report_path",
        default=settings.report.path,
        help=f"Path to last_run_summary.yaml (default: {settings.report.path})"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=version_string(),
        help="Print version information and exit"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        server = ExporterServer(
            build_registry(args.report_path),
            address=args.telemetry_address,
            endpoint=args.telemetry_endpoint
        )
        server.bind()
    except (ConfigurationError, ListenerBindFailure) as e:
        logger.critical(f"Exporter failed to start: {e}")
        sys.exit(1)

    logger.info(
        f"Starting Server: {args.telemetry_address} "
        f"(endpoint={args.telemetry_endpoint}, report={args.report_path})"
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        server.stop()

    logger.info("Exporter terminated")
    sys.exit(0)


if __name__ == "__main__":
    main()
