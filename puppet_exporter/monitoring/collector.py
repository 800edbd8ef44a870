"""
Prometheus collector for Puppet's last run summary.

Every scrape re-reads the status file and emits one gauge per resource
count. Nothing is cached between scrapes.

Usage:
    from prometheus_client import CollectorRegistry
    from puppet_exporter.monitoring.collector import LastRunCollector

    registry = CollectorRegistry()
    registry.register(LastRunCollector("/opt/puppetlabs/puppet/cache/state/last_run_summary.yaml"))
"""
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from puppet_exporter.common.exceptions import ExporterError
from puppet_exporter.common.logging_config import get_logger
from puppet_exporter.report.loader import load_report
from puppet_exporter.report.models import RESOURCE_FIELDS

logger = get_logger(__name__)

NAMESPACE = "puppet_last_run_exporter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Static metadata for one exported gauge."""
    name: str
    documentation: str
    key: str
    type: str = "gauge"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


# -- Resource gauges ------------------------------------------------------
# YAML key under resources -> (metric suffix, help text)
_RESOURCE_METRICS: Dict[str, Tuple[str, str]] = {
    "changed": ("ResourcesChanged", "Number of changed resources"),
    "corrective_change": ("ResourcesCorrectiveChange", "Number of corrective changes"),
    "failed": ("ResourcesFailed", "Number of failed resources"),
    "failed_to_restart": ("ResourcesFailedToRestart", "Number of resources that failed to restart"),
    "out_of_sync": ("ResourcesOutOfSync", "Number of out of sync resources"),
    "restarted": ("ResourcesRestarted", "Number of restarted resources"),
    "scheduled": ("ResourcesScheduled", "Number of scheduled resources"),
    "skipped": ("ResourcesSkipped", "Number of skipped resources"),
    "total": ("ResourcesTotal", "Total number of resources"),
}

# One gauge per entry of RESOURCE_FIELDS, in the same order
RESOURCE_DESCRIPTORS: Tuple[MetricDescriptor, ...] = tuple(
    MetricDescriptor(
        name=build_fq_name(NAMESPACE, "", _RESOURCE_METRICS[key][0]),
        documentation=_RESOURCE_METRICS[key][1],
        key=key,
    )
    for key, _ in RESOURCE_FIELDS
)


class LastRunCollector(Collector):
    """
    Custom collector exposing the resource section of last_run_summary.yaml.

    Scrapes are serialized by a lock that spans read, parse and sample
    building, so one scrape's samples always come from a single read.

    Args:
        report_path: path to last_run_summary.yaml
    """

    def __init__(self, report_path: Union[str, Path]) -> None:
        self.report_path = Path(report_path)
        self._descriptors = RESOURCE_DESCRIPTORS
        self._lock = threading.Lock()

    @property
    def descriptors(self) -> Tuple[MetricDescriptor, ...]:
        return self._descriptors

    def describe(self) -> List[GaugeMetricFamily]:
        """
        Describe the exported metrics without touching the status file.

        Called by ``CollectorRegistry.register``; without it the registry
        would call ``collect`` at registration time.
        """
        return [self._family(d) for d in self._descriptors]

    def scrape(self) -> List[Tuple[MetricDescriptor, float]]:
        """
        Read the status file and return one (descriptor, value) pair per gauge.

        Raises:
            ReportUnavailable: status file missing or unreadable
            ReportMalformed: status file content has the wrong shape
        """
        with self._lock:
            values = load_report(self.report_path).resource_values()
            samples = [(d, values[d.key]) for d in self._descriptors]
        logger.debug(f"Scraped {len(samples)} resource samples from {self.report_path}")
        return samples

    def collect(self) -> List[GaugeMetricFamily]:
        """
        Registry hook invoked on every exposition.

        Report errors are logged and yield no families; they never
        propagate to the HTTP handler.
        """
        try:
            samples = self.scrape()
        except ExporterError as e:
            logger.error(
                f"Error scraping puppet last run report: {e}",
                extra={"report_path": str(self.report_path)},
            )
            return []

        families = []
        for descriptor, value in samples:
            family = self._family(descriptor)
            family.add_metric([], value)
            families.append(family)
        return families

    @staticmethod
    def _family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
        return GaugeMetricFamily(descriptor.name, descriptor.documentation)
