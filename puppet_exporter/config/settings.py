"""
Configuration management using Pydantic Settings.
Loads configuration from environment variables with validation.
Command-line flags in exporter.py override these values at startup.
"""
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import Field

# Load .env from the working directory into os.environ
load_dotenv(Path.cwd() / ".env")


class TelemetrySettings(BaseSettings):
    """HTTP exposition configuration"""
    address: str = Field(default=":9309")
    endpoint: str = Field(default="/metrics")

    class Config:
        env_prefix = "TELEMETRY_"


class ReportSettings(BaseSettings):
    """Location of the Puppet last run summary"""
    path: str = Field(default="last_run_summary.yaml")

    class Config:
        env_prefix = "REPORT_"


class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: str = Field(default="INFO")
    format: str = Field(default="json")

    class Config:
        env_prefix = "LOG_"


class Settings(BaseSettings):
    """Main settings aggregating all configuration sections"""
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        extra = "ignore"


# Singleton instance - import this in other modules
settings = Settings()
