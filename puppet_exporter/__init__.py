"""
Puppet last-run exporter.
Republishes the resource counts of Puppet's last_run_summary.yaml as
Prometheus gauges.
"""
__version__ = "0.1.0"
