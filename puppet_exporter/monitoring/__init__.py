"""
Monitoring module - Prometheus collector and exposition server.
"""
from puppet_exporter.monitoring.collector import (
    LastRunCollector,
    MetricDescriptor,
    RESOURCE_DESCRIPTORS,
)
from puppet_exporter.monitoring.build_info import register_build_info, version_string
from puppet_exporter.monitoring.server import ExporterServer, parse_listen_address

__all__ = [
    "LastRunCollector",
    "MetricDescriptor",
    "RESOURCE_DESCRIPTORS",
    "register_build_info",
    "version_string",
    "ExporterServer",
    "parse_listen_address",
]
