"""
Schema review pipeline - main orchestration
"""

from typing import Optional, Protocol

import structlog

from .client import ReviewServiceClient
from .exceptions import ConnectivityError
from .models import CodeChangeInfo, DbtModelInfo
from .renderer import render_report
from .report import ReportAggregator

logger = structlog.get_logger()


class CodeChangeSource(Protocol):
    def get_code_change_info(self) -> CodeChangeInfo: ...


class ModelMetadataSource(Protocol):
    def get_model_info(self, code_change_info: CodeChangeInfo) -> DbtModelInfo: ...


class CommentSink(Protocol):
    def post_comment(self, body: str) -> None: ...


class SchemaReviewPipeline:
    """Review a code change and post the enriched findings"""

    def __init__(
        self,
        client: ReviewServiceClient,
        aggregator: ReportAggregator,
        change_source: CodeChangeSource,
        model_source: ModelMetadataSource,
        comment_sink: CommentSink,
    ):
        self.client = client
        self.aggregator = aggregator
        self.change_source = change_source
        self.model_source = model_source
        self.comment_sink = comment_sink

    def run(self) -> Optional[str]:
        """Run the complete review; returns the posted comment, or None when nothing was found"""
        logger.info("Starting schema review pipeline", api_url=self.client.api_url)

        # Phase 1: gate on connectivity
        if not self.client.is_connected():
            raise ConnectivityError(
                "Failed to connect to the review service, please check the configuration: "
                f"api_url={self.client.api_url}, api_token_set={bool(self.client.config.api_token)}"
            )

        # Phase 2: collect the change and its model metadata
        code_change_info = self.change_source.get_code_change_info()
        model_info = self.model_source.get_model_info(code_change_info)
        logger.info(
            "Collected code change",
            modified_files=len(code_change_info.modified_files),
            models=len(model_info.models),
        )

        # Phase 3: review and enrich
        report = self.aggregator.review(code_change_info, model_info.to_context())
        if report.is_empty:
            logger.info("No schema changes detected")
            return None

        # Phase 4: publish
        comment = render_report(report)
        self.comment_sink.post_comment(comment)
        logger.info("Posted schema change report", report_items=len(report))
        return comment
