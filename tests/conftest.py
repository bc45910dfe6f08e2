# tests/conftest.py
"""
Shared fixtures: a review service config and an httpx-mocked client
"""

import json
from typing import Callable, List

import httpx
import pytest
import structlog

from schema_review.client import ReviewServiceClient
from schema_review.config import ReviewServiceConfig
from schema_review.models import CodeChangeInfo, ModifiedFile

API_URL = "https://gateway.example.com/api/v1"
APP_URL = "https://app.example.com"
DATA_SOURCE_ID = 42


def table_details_payload(table_name: str = "TPCH_ALL", artifact_id: int = 1001) -> dict:
    return {
        "tableDetails": {
            "artifactId": artifact_id,
            "artifact": {"databaseName": "PC_DBT_DB", "schemaName": "TEST_DATA", "tableName": table_name},
            "insertedRowCount": 1500,
            "totalRowCount": 1234567,
            "mostRecentUpdateTimestamp": 1704067200,
            "loadDurationSeconds": 12,
            "totalBytesProcessed": 1536,
            "downstreamObjectCount": 3,
        }
    }


def schema_change_payload(table_name: str, description: str) -> dict:
    return {
        "filename": f"snowflake/models/{table_name.lower()}.sql",
        "fullTableName": {"databaseName": "PC_DBT_DB", "schemaName": "TEST_DATA", "tableName": table_name},
        "changeDescription": description,
    }


class RecordingHandler:
    """MockTransport handler that records requests and delegates to a responder"""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def service_config() -> ReviewServiceConfig:
    return ReviewServiceConfig(
        api_url=API_URL,
        app_url=APP_URL,
        api_token="secret-token",
        data_source_id=DATA_SOURCE_ID,
    )


@pytest.fixture
def make_client(service_config):
    """Build a client whose HTTP traffic goes to the given responder"""
    clients = []

    def factory(responder):
        handler = RecordingHandler(responder)
        client = ReviewServiceClient(service_config, httpx.Client(transport=httpx.MockTransport(handler)))
        clients.append(client)
        return client, handler

    yield factory
    for client in clients:
        client.http.close()


@pytest.fixture
def tpch_change() -> CodeChangeInfo:
    change = CodeChangeInfo()
    change.add(ModifiedFile(
        file_path="snowflake/models/tpch_all.sql",
        diff="-        nation.nation_name,\n",
    ))
    return change
