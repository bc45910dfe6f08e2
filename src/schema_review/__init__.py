"""
Schema Review - dbt pull request schema change reviewer

Correlates the model files changed in a pull request with the tables they
build, asks the review service which changes are structurally risky, and
reports each finding together with live telemetry for the affected table.
"""

__version__ = "0.1.0"

from .client import ReviewServiceClient
from .config import DbtConfig, GitHubConfig, ReviewServiceConfig
from .models import (
    CodeChangeInfo,
    DbtModel,
    DbtModelInfo,
    FullTableName,
    ModifiedFile,
    ReportItem,
    SchemaChange,
    SchemaChangeReport,
    TableTelemetry,
)
from .pipeline import SchemaReviewPipeline
from .renderer import render_report
from .report import ReportAggregator, dashboard_link

__all__ = [
    "ReviewServiceClient",
    "ReviewServiceConfig",
    "GitHubConfig",
    "DbtConfig",
    "CodeChangeInfo",
    "ModifiedFile",
    "FullTableName",
    "DbtModel",
    "DbtModelInfo",
    "SchemaChange",
    "TableTelemetry",
    "ReportItem",
    "SchemaChangeReport",
    "SchemaReviewPipeline",
    "ReportAggregator",
    "dashboard_link",
    "render_report",
]
