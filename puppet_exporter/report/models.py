"""Pydantic models for Puppet's last_run_summary.yaml."""

from typing import Annotated, Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, Strict, field_validator

# YAML ints and floats only; booleans and quoted strings are rejected
Number = Annotated[float, Strict()]


class VersionSection(BaseModel):
    """Catalog and agent versions of the last run."""
    model_config = ConfigDict(extra="ignore")

    config: Optional[str] = None
    puppet: Optional[str] = None

    @field_validator('config', 'puppet', mode='before')
    @classmethod
    def coerce_to_str(cls, v: Any) -> Optional[str]:
        """Puppet writes the config version as an integer timestamp or a string."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        raise ValueError(f"expected a string or number, got {type(v).__name__}")


class ResourcesSection(BaseModel):
    """Resource counts of the last run."""
    model_config = ConfigDict(extra="ignore")

    changed: Number = 0.0
    corrective_change: Number = 0.0
    failed: Number = 0.0
    failed_to_restart: Number = 0.0
    out_of_sync: Number = 0.0
    restarted: Number = 0.0
    scheduled: Number = 0.0
    skipped: Number = 0.0
    total: Number = 0.0


class TimeSection(BaseModel):
    """Per-phase durations in seconds; last_run is a unix timestamp."""
    model_config = ConfigDict(extra="ignore")

    anchor: Number = 0.0
    archive: Number = 0.0
    catalog_application: Number = 0.0
    config_retrieval: Number = 0.0
    convert_catalog: Number = 0.0
    exec: Number = 0.0
    fact_generation: Number = 0.0
    file: Number = 0.0
    filebucket: Number = 0.0
    group: Number = 0.0
    node_retrieval: Number = 0.0
    package: Number = 0.0
    plugin_sync: Number = 0.0
    schedule: Number = 0.0
    service: Number = 0.0
    total: Number = 0.0
    transaction_evaluation: Number = 0.0
    user: Number = 0.0
    yumrepo: Number = 0.0
    last_run: Number = 0.0


class ChangesSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total: Number = 0.0


class EventsSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    failure: Number = 0.0
    success: Number = 0.0
    total: Number = 0.0


class StatusReport(BaseModel):
    """
    In-memory view of one last_run_summary.yaml document.

    Every section is optional. Only ``resources`` is exported; the other
    sections are validated so a corrupt file is detected as a whole.
    """
    model_config = ConfigDict(extra="ignore")

    version: VersionSection = Field(default_factory=VersionSection)
    resources: ResourcesSection = Field(default_factory=ResourcesSection)
    time: TimeSection = Field(default_factory=TimeSection)
    changes: ChangesSection = Field(default_factory=ChangesSection)
    events: EventsSection = Field(default_factory=EventsSection)

    @field_validator('version', 'resources', 'time', 'changes', 'events', mode='before')
    @classmethod
    def empty_section(cls, v: Any) -> Any:
        """A key with no body (``events:``) loads as None."""
        return {} if v is None else v

    def resource_values(self) -> Dict[str, float]:
        """Return resource counts keyed by their YAML key, in RESOURCE_FIELDS order."""
        return {
            key: getattr(self.resources, attr)
            for key, attr in RESOURCE_FIELDS
        }


# YAML key under ``resources`` -> ResourcesSection attribute
RESOURCE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("changed", "changed"),
    ("corrective_change", "corrective_change"),
    ("failed", "failed"),
    ("failed_to_restart", "failed_to_restart"),
    ("out_of_sync", "out_of_sync"),
    ("restarted", "restarted"),
    ("scheduled", "scheduled"),
    ("skipped", "skipped"),
    ("total", "total"),
)
