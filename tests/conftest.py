"""Shared fixtures for exporter tests."""
import pytest

SUMMARY_YAML = """\
---
version:
  config: 1617051337
  puppet: 6.21.1
resources:
  changed: 3
  corrective_change: 0
  failed: 1
  failed_to_restart: 0
  out_of_sync: 4
  restarted: 0
  scheduled: 4
  skipped: 0
  total: 12
time:
  anchor: 0.000253
  catalog_application: 1.0523
  config_retrieval: 2.3015
  convert_catalog: 0.4456
  fact_generation: 0.9581
  file: 0.1826
  filebucket: 0.000102
  node_retrieval: 0.3017
  package: 0.0621
  plugin_sync: 0.7734
  schedule: 0.000412
  service: 0.2531
  transaction_evaluation: 0.9877
  total: 5.9982
  last_run: 1617051344
changes:
  total: 3
events:
  failure: 1
  success: 3
  total: 4
"""

EXPECTED_RESOURCES = {
    "changed": 3.0,
    "corrective_change": 0.0,
    "failed": 1.0,
    "failed_to_restart": 0.0,
    "out_of_sync": 4.0,
    "restarted": 0.0,
    "scheduled": 4.0,
    "skipped": 0.0,
    "total": 12.0,
}


def resources_yaml(**values) -> str:
    """Build a minimal summary document with only a resources section."""
    lines = ["resources:"]
    lines.extend(f"  {key}: {value}" for key, value in values.items())
    return "\n".join(lines) + "\n"


@pytest.fixture
def summary_yaml():
    return SUMMARY_YAML


@pytest.fixture
def report_file(tmp_path):
    """Write the sample last_run_summary.yaml and return its path."""
    path = tmp_path / "last_run_summary.yaml"
    path.write_text(SUMMARY_YAML)
    return path


@pytest.fixture
def missing_report(tmp_path):
    return tmp_path / "does_not_exist.yaml"
