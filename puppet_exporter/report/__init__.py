"""
Report module - Puppet last run summary model and loader.
"""
from puppet_exporter.report.models import StatusReport, RESOURCE_FIELDS
from puppet_exporter.report.loader import load_report, parse_report

__all__ = [
    "StatusReport",
    "RESOURCE_FIELDS",
    "load_report",
    "parse_report",
]
