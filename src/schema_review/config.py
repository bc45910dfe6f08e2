# src/schema_review/config.py
"""
Configuration for the schema review pipeline
"""

import json
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

DEFAULT_API_URL = "https://gateway.revefi.com/api/v1"
DEFAULT_APP_URL = "https://app.revefi.com"


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigurationError(f"Valid {name} is required")
    return value


class ReviewServiceConfig(BaseModel):
    """Review service connection settings"""
    api_url: str = Field(default=DEFAULT_API_URL, description="API base URL")
    app_url: str = Field(default=DEFAULT_APP_URL, description="Web app base URL for dashboard links")
    api_token: str = Field(..., min_length=1, description="Bearer token")
    data_source_id: int = Field(..., description="Data source findings are associated with")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReviewServiceConfig":
        environ = os.environ if environ is None else environ

        api_token = _require(environ, "REVEFI_API_TOKEN")
        raw_id = _require(environ, "REVEFI_DATA_SOURCE_ID")
        try:
            data_source_id = int(raw_id)
        except ValueError:
            raise ConfigurationError(f"Valid REVEFI_DATA_SOURCE_ID is required, got {raw_id!r}")

        try:
            return cls(
                api_url=environ.get("REVEFI_API_ENDPOINT") or DEFAULT_API_URL,
                app_url=environ.get("REVEFI_APP_URL") or DEFAULT_APP_URL,
                api_token=api_token,
                data_source_id=data_source_id,
                timeout_seconds=float(environ.get("REVEFI_TIMEOUT_SECONDS") or 30.0),
            )
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid review service configuration: {e}")


class GitHubConfig(BaseModel):
    """Pull request the run is reviewing"""
    token: str = Field(..., min_length=1, description="GitHub token")
    repository: str = Field(..., pattern=r"^[^/]+/[^/]+$", description="owner/repo")
    pull_number: int = Field(..., gt=0, description="Pull request number")
    api_url: str = Field(default="https://api.github.com", description="GitHub REST API URL")

    @property
    def owner(self) -> str:
        return self.repository.split("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/")[1]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GitHubConfig":
        environ = os.environ if environ is None else environ

        token = _require(environ, "GITHUB_TOKEN")
        repository = _require(environ, "GITHUB_REPOSITORY")
        event_path = Path(_require(environ, "GITHUB_EVENT_PATH"))

        try:
            with open(event_path, 'r') as f:
                event = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read GitHub event payload {event_path}: {e}")

        pull_request = event.get("pull_request")
        if not pull_request:
            raise ConfigurationError("This action is designed to run on pull request events only")

        try:
            return cls(
                token=token,
                repository=repository,
                pull_number=pull_request["number"],
                api_url=environ.get("GITHUB_API_URL") or "https://api.github.com",
            )
        except (ValidationError, KeyError) as e:
            raise ConfigurationError(f"Invalid GitHub configuration: {e}")


class DbtConfig(BaseModel):
    """dbt invocation settings; secrets are passed to dbt, never exported globally"""
    workspace_dir: str = Field(default=".", description="Repository checkout root")
    profile_secrets: Dict[str, str] = Field(default_factory=dict, description="Env vars for profiles.yml")
    dbt_executable: str = Field(default="dbt", description="dbt binary")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DbtConfig":
        environ = os.environ if environ is None else environ

        raw_secrets = environ.get("DBT_PROFILE_SECRETS") or "{}"
        try:
            secrets = json.loads(raw_secrets)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"DBT_PROFILE_SECRETS is not valid JSON: {e}")
        if not isinstance(secrets, dict):
            raise ConfigurationError("DBT_PROFILE_SECRETS must be a JSON object")

        return cls(
            workspace_dir=environ.get("GITHUB_WORKSPACE") or ".",
            profile_secrets={str(k): str(v) for k, v in secrets.items()},
        )
