"""
Page Monitor engine.

Detects content changes on monitored web pages and renders change reports.
Kept free of CLI concerns so it can be driven from other front ends.
"""

# Core models
# Main orchestrator
from .config import ConfigurationError, MailgunSettings, MonitorConfig
from .models import (
    DiffRecord,
    DiffTag,
    FetchResult,
    Report,
    ResourceOutcome,
    ResourceState,
    RunResult,
)
from .runner import MonitorRunner

__all__ = [
    # Models
    "DiffRecord",
    "DiffTag",
    "FetchResult",
    "Report",
    "ResourceOutcome",
    "ResourceState",
    "RunResult",
    # Configuration
    "ConfigurationError",
    "MailgunSettings",
    "MonitorConfig",
    # Main entry point
    "MonitorRunner",
]
