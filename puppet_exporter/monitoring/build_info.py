"""Static build/version info metric."""
import platform

from prometheus_client import CollectorRegistry, Info

from puppet_exporter import __version__
from puppet_exporter.monitoring.collector import NAMESPACE


def version_string() -> str:
    return (
        f"{NAMESPACE}, version {__version__} "
        f"(python {platform.python_version()})"
    )


def register_build_info(registry: CollectorRegistry) -> Info:
    """
    Register ``puppet_last_run_exporter_build_info`` on *registry*.
    Labels are set once here and never recomputed.
    """
    build_info = Info(
        f"{NAMESPACE}_build",
        "Puppet last run exporter build / version info",
        registry=registry,
    )
    build_info.info({
        "version": __version__,
        "python_version": platform.python_version(),
        "python_implementation": platform.python_implementation(),
    })
    return build_info
