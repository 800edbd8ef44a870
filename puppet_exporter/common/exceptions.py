"""
Custom exceptions for the Puppet last-run exporter.
Report errors are per-scrape and recoverable; listener and configuration
errors are fatal at startup.
"""


class ExporterError(Exception):
    """Base exception for the exporter"""
    pass


class ConfigurationError(ExporterError):
    """Error in configuration loading or validation"""
    pass


class ReportError(ExporterError):
    """Error obtaining a usable status report from disk"""

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ReportUnavailable(ReportError):
    """Status file is missing or cannot be read"""
    pass


class ReportMalformed(ReportError):
    """Status file content does not match the expected document shape"""
    pass


class ListenerBindFailure(ExporterError):
    """HTTP listener could not bind its address"""
    pass
