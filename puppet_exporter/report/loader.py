"""
Status file loader.
Reads last_run_summary.yaml from disk and validates it into a StatusReport.
"""
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from puppet_exporter.common.exceptions import ReportMalformed, ReportUnavailable
from puppet_exporter.report.models import StatusReport


def read_report_text(path: Union[str, Path]) -> str:
    """
    Read the raw status file.

    Raises:
        ReportUnavailable: file missing, unreadable or not a regular file
        ReportMalformed: content is not valid UTF-8
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ReportUnavailable(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise ReportMalformed(path, f"not valid UTF-8: {e.reason}") from e


def parse_report(content: str, path: Union[str, Path] = "<string>") -> StatusReport:
    """
    Parse YAML content into a StatusReport.

    Args:
        content: YAML document text
        path: Source path, used in error messages only

    Raises:
        ReportMalformed: syntax error, non-mapping document or wrong value types
    """
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ReportMalformed(path, f"invalid YAML: {e}") from e
    except RecursionError as e:
        raise ReportMalformed(path, "invalid YAML: nesting too deep") from e
    except ValueError as e:
        # Constructor errors, e.g. an out-of-range timestamp scalar
        raise ReportMalformed(path, f"invalid YAML value: {e}") from e

    if not isinstance(raw, dict):
        raise ReportMalformed(
            path, f"expected a mapping at top level, got {type(raw).__name__}"
        )

    try:
        return StatusReport.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in e.errors()
        )
        raise ReportMalformed(path, f"unexpected values for {fields}") from e


def load_report(path: Union[str, Path]) -> StatusReport:
    """Read and parse the status file at *path*."""
    return parse_report(read_report_text(path), path)
