"""
Error taxonomy for the schema review pipeline

Degraded-but-valid outcomes (oversized review payloads, an unreachable
service) are returned as plain values by the client. Everything here is
fatal and is meant to propagate to the CLI.
"""

from typing import Any, Dict, Optional


class SchemaReviewError(Exception):
    """Base class for all pipeline errors"""


class ConfigurationError(SchemaReviewError):
    """Missing or invalid configuration, raised before any network call"""


class ConnectivityError(SchemaReviewError):
    """The review service could not be reached"""


class ServiceRequestError(SchemaReviewError):
    """Non-success HTTP status, or no response at all, from the review service"""

    def __init__(
        self,
        operation: str,
        status_code: Optional[int],
        body: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        self.context = context or {}

        if status_code is None:
            message = f"{operation} request failed without a response"
        else:
            message = f"{operation} request failed with status {status_code}"
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            message += f" ({details})"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)


class ResponseParseError(SchemaReviewError):
    """A success response whose body is missing or malformed"""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Invalid {operation} response: {detail}")


class DbtMetadataError(SchemaReviewError):
    """dbt could not produce model metadata for a modified file"""


class GitHubError(SchemaReviewError):
    """GitHub API call failed"""
