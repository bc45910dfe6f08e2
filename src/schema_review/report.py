"""
Builds a schema change report from review findings
"""

from typing import List

import structlog

from .client import ReviewServiceClient
from .models import CodeChangeInfo, ReportItem, SchemaChange, SchemaChangeReport

logger = structlog.get_logger()


def dashboard_link(app_url: str, data_source_id: int, artifact_id: int) -> str:
    """Link to a table's dashboard in the web app"""
    return f"{app_url.rstrip('/')}/table/{artifact_id}/dashboard?dsId={data_source_id}"


class ReportAggregator:
    """Enriches each schema change with telemetry for its table"""

    def __init__(self, client: ReviewServiceClient, app_url: str, data_source_id: int):
        self.client = client
        self.app_url = app_url
        self.data_source_id = data_source_id

    def build_report(self, schema_changes: List[SchemaChange]) -> SchemaChangeReport:
        """One telemetry lookup per change, in input order.

        A failed lookup aborts the whole report; a partial report would
        misstate which changes were vetted.
        """
        report = SchemaChangeReport()
        if not schema_changes:
            return report

        for schema_change in schema_changes:
            telemetry = self.client.get_table_details(schema_change.full_table_name)
            report.append(ReportItem(
                filename=schema_change.filename,
                full_table_name=schema_change.full_table_name,
                change_description=schema_change.change_description,
                table_telemetry=telemetry,
                dashboard_link=dashboard_link(self.app_url, self.data_source_id, telemetry.artifact_id),
            ))

        logger.info("Schema change report built", report_items=len(report))
        return report

    def review(self, code_change_info: CodeChangeInfo, additional_context: str) -> SchemaChangeReport:
        """Review a change batch and build the report for its findings"""
        schema_changes = self.client.review_changes(code_change_info, additional_context)
        return self.build_report(schema_changes)
