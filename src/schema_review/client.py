# src/schema_review/client.py
"""
HTTP client for the schema review service

Three calls: a connectivity probe, the schema review itself and the
per-table telemetry lookup. No retries happen here; a failure is reported
once so the caller knows exactly which request broke.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from .config import ReviewServiceConfig
from .exceptions import ResponseParseError, ServiceRequestError
from .models import (
    CodeChangeInfo,
    FullTableName,
    SchemaChange,
    SchemaReviewRequest,
    SchemaReviewResponse,
    TableDetailsResponse,
    TableTelemetry,
)

logger = structlog.get_logger()

SOURCE_APPLICATION = "github-action"
PAYLOAD_TOO_LARGE = 413


class ReviewServiceClient:
    """Talks to the review service on behalf of one data source"""

    def __init__(self, config: ReviewServiceConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.api_url = config.api_url.rstrip("/")
        self.data_source_id = config.data_source_id
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(timeout=config.timeout_seconds)

    def close(self):
        if self._owns_client:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_token}",
            "X-Source-Application": SOURCE_APPLICATION,
            "Cache-Control": "no-cache, no-store",
            "Pragma": "no-cache",
        }

    def _send(self, operation: str, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.api_url}/{path}"
        logger.debug("Sending request", operation=operation, method=method, url=url)
        try:
            response = self.http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise ServiceRequestError(operation, None, str(e)) from e
        logger.debug("Received response", operation=operation, status=response.status_code)
        return response

    @staticmethod
    def _json(operation: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResponseParseError(operation, f"body is not JSON ({e}): {response.text[:200]!r}")

    def is_connected(self) -> bool:
        """Probe the service; never raises"""
        try:
            response = self._send("ping", "GET", "ping")
        except ServiceRequestError as e:
            logger.warning("Failed to connect to review service", api_url=self.api_url, error=str(e))
            return False

        if not response.is_success:
            logger.warning(
                "Failed to connect to review service",
                api_url=self.api_url,
                status=response.status_code,
                reason=response.reason_phrase,
            )
            return False

        logger.info("Connected to review service", api_url=self.api_url)
        return True

    def review_changes(self, code_change_info: CodeChangeInfo, additional_context: str) -> List[SchemaChange]:
        """Submit a change batch for review.

        An oversized payload (413) is expected for large pull requests and
        yields no findings instead of failing the run.
        """
        request = SchemaReviewRequest(
            data_source_id=self.data_source_id,
            code_change_info=code_change_info,
            additional_context=additional_context,
        )
        response = self._send("schema-review", "POST", "schema-review", json=request.to_wire())

        if response.status_code == PAYLOAD_TOO_LARGE:
            logger.warning(
                "Schema review request was too large, skipping schema review",
                modified_files=len(code_change_info.modified_files),
            )
            return []

        if not response.is_success:
            raise ServiceRequestError(
                "schema-review",
                response.status_code,
                response.text,
                context={"data_source_id": self.data_source_id},
            )

        data = self._json("schema-review", response)
        if not isinstance(data, dict):
            raise ResponseParseError("schema-review", f"expected an object, got {type(data).__name__}")
        try:
            review = SchemaReviewResponse.model_validate(data)
        except ValidationError as e:
            raise ResponseParseError("schema-review", str(e))

        logger.info("Schema review completed", schema_changes=len(review.schema_changes))
        return review.schema_changes

    def get_table_details(self, full_table_name: FullTableName) -> TableTelemetry:
        """Fetch telemetry for one table; any failure is fatal"""
        params = {
            "dataSourceId": self.data_source_id,
            "databaseName": full_table_name.database_name,
            "schemaName": full_table_name.schema_name,
            "tableName": full_table_name.table_name,
        }
        response = self._send("table-details", "GET", "table-details", params=params)

        if not response.is_success:
            raise ServiceRequestError(
                "table-details",
                response.status_code,
                response.text,
                context={"data_source_id": self.data_source_id, "table": full_table_name.qualified_name},
            )

        data = self._json("table-details", response)
        if not isinstance(data, dict) or not data.get("tableDetails"):
            raise ResponseParseError(
                "table-details",
                f"missing tableDetails for {full_table_name.qualified_name}: {json.dumps(data)[:200]}",
            )
        try:
            details = TableDetailsResponse.model_validate(data)
        except ValidationError as e:
            raise ResponseParseError("table-details", str(e))

        logger.debug(
            "Fetched table details",
            table=full_table_name.qualified_name,
            artifact_id=details.table_details.artifact_id,
        )
        return details.table_details
