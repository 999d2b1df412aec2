"""
GoCD server client — looks up pipeline history for build details.

The stage notification GoCD posts does not carry the trigger reason or
the approver of the stage, so those are fetched from the pipeline
history API on demand.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from gocd_teams.core import Rules
from gocd_teams.notifications.errors import DetailsNotFound

logger = logging.getLogger(__name__)

_HISTORY_ACCEPT = "application/vnd.go.cd.v1+json"


class BuildCause(BaseModel):
    model_config = ConfigDict(extra="ignore")

    approver: Optional[str] = None
    trigger_message: Optional[str] = None
    trigger_forced: bool = False
    material_revisions: list[dict[str, Any]] = Field(default_factory=list)


class Stage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    counter: int = 0
    result: Optional[str] = None
    approved_by: Optional[str] = None
    approval_type: Optional[str] = None
    jobs: list[dict[str, Any]] = Field(default_factory=list)


class Pipeline(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    counter: int
    label: Optional[str] = None
    natural_order: Optional[float] = None
    build_cause: BuildCause = Field(default_factory=BuildCause)
    stages: list[Stage] = Field(default_factory=list)


class GoServer:
    """Minimal client for the GoCD pipeline history API."""

    def __init__(self, rules: Rules, *, http_client: httpx.Client | None = None) -> None:
        self.rules = rules
        self._client = http_client

    def _auth(self) -> Optional[httpx.Auth]:
        if self.rules.go_api_user and self.rules.go_api_password:
            return httpx.BasicAuth(self.rules.go_api_user, self.rules.go_api_password)
        return None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": _HISTORY_ACCEPT}
        if self.rules.go_api_token:
            headers["Authorization"] = f"Bearer {self.rules.go_api_token}"
        return headers

    def pipeline_history(self, pipeline_name: str) -> list[Pipeline]:
        """Most recent runs of a pipeline, newest first."""
        url = f"{self.rules.go_server_host.rstrip('/')}/go/api/pipelines/{pipeline_name}/history"
        logger.debug("Fetching pipeline history from %s", url)

        client = self._client or httpx.Client(timeout=self.rules.timeout)
        try:
            resp = client.get(url, headers=self._headers(), auth=self._auth())
            resp.raise_for_status()
            data = resp.json()
        finally:
            if not self._client:
                client.close()

        if data is None:
            return []
        if not isinstance(data, dict):
            raise DetailsNotFound(pipeline_name, reason=f"unexpected history response ({type(data).__name__})")
        pipelines = data.get("pipelines") or []
        if not isinstance(pipelines, list):
            raise DetailsNotFound(pipeline_name, reason="history response has no pipeline list")
        return [Pipeline.model_validate(p) for p in pipelines]
