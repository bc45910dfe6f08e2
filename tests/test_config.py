# tests/test_config.py
"""
Environment configuration loading
"""

import json

import pytest

from schema_review.config import DEFAULT_API_URL, DEFAULT_APP_URL, DbtConfig, GitHubConfig, ReviewServiceConfig
from schema_review.exceptions import ConfigurationError


def test_review_service_defaults():
    config = ReviewServiceConfig.from_env({"REVEFI_API_TOKEN": "tok", "REVEFI_DATA_SOURCE_ID": "17"})
    assert config.api_url == DEFAULT_API_URL
    assert config.app_url == DEFAULT_APP_URL
    assert config.data_source_id == 17
    assert config.timeout_seconds == 30.0


def test_review_service_overrides():
    config = ReviewServiceConfig.from_env({
        "REVEFI_API_TOKEN": "tok",
        "REVEFI_DATA_SOURCE_ID": "3",
        "REVEFI_API_ENDPOINT": "https://gateway.staging.example/api/v1",
        "REVEFI_APP_URL": "https://app.staging.example",
        "REVEFI_TIMEOUT_SECONDS": "5",
    })
    assert config.api_url == "https://gateway.staging.example/api/v1"
    assert config.app_url == "https://app.staging.example"
    assert config.timeout_seconds == 5.0


@pytest.mark.parametrize("environ", [
    {"REVEFI_DATA_SOURCE_ID": "1"},
    {"REVEFI_API_TOKEN": "tok"},
    {"REVEFI_API_TOKEN": "tok", "REVEFI_DATA_SOURCE_ID": "abc"},
    {"REVEFI_API_TOKEN": "", "REVEFI_DATA_SOURCE_ID": "1"},
])
def test_review_service_invalid(environ):
    with pytest.raises(ConfigurationError):
        ReviewServiceConfig.from_env(environ)


def write_event(tmp_path, payload):
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps(payload))
    return str(event_path)


def test_github_config_from_pull_request_event(tmp_path):
    config = GitHubConfig.from_env({
        "GITHUB_TOKEN": "gh",
        "GITHUB_REPOSITORY": "acme/warehouse",
        "GITHUB_EVENT_PATH": write_event(tmp_path, {"pull_request": {"number": 12}}),
    })
    assert config.owner == "acme"
    assert config.repo == "warehouse"
    assert config.pull_number == 12


def test_github_config_requires_pull_request(tmp_path):
    with pytest.raises(ConfigurationError, match="pull request"):
        GitHubConfig.from_env({
            "GITHUB_TOKEN": "gh",
            "GITHUB_REPOSITORY": "acme/warehouse",
            "GITHUB_EVENT_PATH": write_event(tmp_path, {"push": {}}),
        })


def test_github_config_requires_token(tmp_path):
    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        GitHubConfig.from_env({"GITHUB_REPOSITORY": "acme/warehouse"})


def test_dbt_config_secrets():
    config = DbtConfig.from_env({
        "DBT_PROFILE_SECRETS": '{"SNOWFLAKE_PASSWORD": "pw", "PORT": 443}',
        "GITHUB_WORKSPACE": "/workspace",
    })
    assert config.profile_secrets == {"SNOWFLAKE_PASSWORD": "pw", "PORT": "443"}
    assert config.workspace_dir == "/workspace"


@pytest.mark.parametrize("raw", ["not json", "[1, 2]"])
def test_dbt_config_invalid_secrets(raw):
    with pytest.raises(ConfigurationError):
        DbtConfig.from_env({"DBT_PROFILE_SECRETS": raw})
