"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from gocd_teams.core import PipelineRule, Rules

GRAPH = "https://graph.microsoft.com/v1.0"


def make_response(payload: Any = None, status_code: int = 200, url: str = "https://example.com") -> MagicMock:
    """A stand-in for httpx.Response; raise_for_status fails on non-2xx."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.content = b"{}" if payload is not None else b""
    if status_code >= 400:
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"HTTP {status_code}",
            request=httpx.Request("GET", url),
            response=httpx.Response(status_code),
        )
    return resp


def make_http(routes: dict[str, Any]) -> MagicMock:
    """
    A MagicMock httpx.Client answering GETs from ``routes``.

    Keys are URL suffixes; values are JSON payloads or prepared responses.
    POSTs answer 201 with an empty body.
    """
    client = MagicMock()

    def _get(url, **kwargs):
        for suffix, payload in routes.items():
            if url.endswith(suffix):
                return payload if isinstance(payload, MagicMock) else make_response(payload, url=url)
        return make_response(None, status_code=404, url=url)

    client.get = MagicMock(side_effect=_get)
    client.post = MagicMock(return_value=make_response(None, status_code=201))
    return client


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test artifacts."""
    dirpath = tempfile.mkdtemp()
    yield Path(dirpath)
    shutil.rmtree(dirpath, ignore_errors=True)


@pytest.fixture
def rules():
    return Rules(
        webhook_url="test-token",
        go_server_host="http://go.example",
        go_api_user="admin",
        go_api_password="badger",
        pipeline_rules=[PipelineRule(team="team-1", channel="Builds")],
    )


@pytest.fixture
def rule():
    return PipelineRule(team="team-1", channel="Builds")


@pytest.fixture
def message_data():
    """Stage status notification as GoCD posts it."""
    return {
        "pipeline": {
            "name": "build",
            "counter": "12",
            "group": "services",
            "build-cause": [],
            "stage": {
                "name": "test",
                "counter": "1",
                "approval-type": "success",
                "approved-by": "changes",
                "state": "Passed",
                "result": "Passed",
                "create-time": "2024-01-01T10:00:00.000Z",
                "last-transition-time": "2024-01-01T10:05:00.000Z",
                "jobs": [],
            },
        }
    }


@pytest.fixture
def history_data():
    """Pipeline history response from the GoCD API."""
    return {
        "pipelines": [
            {
                "name": "build",
                "counter": 12,
                "label": "12",
                "natural_order": 12.0,
                "build_cause": {
                    "approver": "",
                    "trigger_message": "modified by alice",
                    "trigger_forced": False,
                    "material_revisions": [],
                },
                "stages": [
                    {"name": "compile", "counter": 1, "result": "Passed", "approved_by": "changes"},
                    {"name": "test", "counter": 1, "result": "Passed", "approved_by": "alice"},
                ],
            },
            {
                "name": "build",
                "counter": 11,
                "build_cause": {"trigger_message": "modified by bob"},
                "stages": [{"name": "test", "counter": 1, "approved_by": "bob"}],
            },
        ]
    }
