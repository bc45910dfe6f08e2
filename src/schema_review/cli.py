# src/schema_review/cli.py
"""
Command line entry point: review the current pull request and comment on it
"""

import argparse
import os
import sys
from typing import List, Mapping, Optional

import structlog

from .client import ReviewServiceClient
from .config import DbtConfig, GitHubConfig, ReviewServiceConfig
from .dbt import DbtProjectInspector
from .exceptions import SchemaReviewError
from .github import GitHubPullRequest
from .logging_config import configure_logging
from .pipeline import SchemaReviewPipeline
from .report import ReportAggregator

logger = structlog.get_logger()


def build_pipeline(environ: Mapping[str, str]) -> SchemaReviewPipeline:
    """Wire the pipeline from environment configuration"""
    github_config = GitHubConfig.from_env(environ)
    service_config = ReviewServiceConfig.from_env(environ)
    dbt_config = DbtConfig.from_env(environ)

    client = ReviewServiceClient(service_config)
    pull_request = GitHubPullRequest(github_config)
    return SchemaReviewPipeline(
        client=client,
        aggregator=ReportAggregator(client, service_config.app_url, service_config.data_source_id),
        change_source=pull_request,
        model_source=DbtProjectInspector(dbt_config),
        comment_sink=pull_request,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="schema-review",
        description="Detect schema changes in a pull request and comment with table telemetry",
    )
    parser.add_argument("--log-level", default=os.getenv("SCHEMA_REVIEW_LOG_LEVEL", "INFO"))
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=os.getenv("SCHEMA_REVIEW_LOG_JSON", "false").lower() == "true",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.json_logs)

    try:
        pipeline = build_pipeline(os.environ)
        try:
            comment = pipeline.run()
        finally:
            pipeline.client.close()
    except SchemaReviewError as e:
        logger.error("Schema review failed", error_type=type(e).__name__, error=str(e))
        return 1

    if comment is None:
        logger.info("Nothing to report")
    return 0


if __name__ == "__main__":
    sys.exit(main())
