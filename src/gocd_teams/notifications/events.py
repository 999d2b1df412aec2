"""
Notification events — what GoCD hands us when a stage changes state.

Defines the pipeline status variants and the GoNotificationMessage model
parsed from the stage-status notification payload.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from gocd_teams.core import Rules
from gocd_teams.notifications.errors import DetailsNotFound
from gocd_teams.notifications.gocd import GoServer, Pipeline, Stage


class PipelineStatus(str, Enum):
    BUILDING = "building"
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    FIXED = "fixed"
    CANCELLED = "cancelled"

    @property
    def verb(self) -> str:
        return _STATUS_VERB[self]

    def __str__(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: str) -> "PipelineStatus":
        """Look up a status by name, ignoring case."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown pipeline status {name!r} (expected one of: {choices})") from None


_STATUS_VERB = {
    PipelineStatus.BUILDING: "is",
    PipelineStatus.PASSED: "has",
    PipelineStatus.FAILED: "has",
    PipelineStatus.BROKEN: "is",
    PipelineStatus.FIXED: "is",
    PipelineStatus.CANCELLED: "is",
}

# Host lifecycle callback name → status
LIFECYCLE_CALLBACKS: dict[str, PipelineStatus] = {
    "on_building": PipelineStatus.BUILDING,
    "on_passed": PipelineStatus.PASSED,
    "on_failed": PipelineStatus.FAILED,
    "on_broken": PipelineStatus.BROKEN,
    "on_fixed": PipelineStatus.FIXED,
    "on_cancelled": PipelineStatus.CANCELLED,
}


def callback_status(callback: str) -> PipelineStatus:
    """Map a callback name (``on_passed`` or ``onPassed``) to its status."""
    key = re.sub(r"(?<!^)(?=[A-Z])", "_", callback).lower()
    try:
        return LIFECYCLE_CALLBACKS[key]
    except KeyError:
        raise ValueError(f"Unknown lifecycle callback: {callback}") from None


class StageInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    name: str
    counter: str
    state: Optional[str] = None
    result: Optional[str] = None
    approval_type: Optional[str] = Field(default=None, alias="approval-type")
    approved_by: Optional[str] = Field(default=None, alias="approved-by")
    create_time: Optional[str] = Field(default=None, alias="create-time")
    last_transition_time: Optional[str] = Field(default=None, alias="last-transition-time")
    jobs: list[dict[str, Any]] = Field(default_factory=list)


class PipelineInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    name: str
    counter: str
    group: Optional[str] = None
    build_cause: list[dict[str, Any]] = Field(default_factory=list, alias="build-cause")
    stage: StageInfo


class GoNotificationMessage(BaseModel):
    """Stage status notification as posted by the GoCD server."""

    model_config = ConfigDict(extra="ignore")

    pipeline: PipelineInfo

    @property
    def pipeline_name(self) -> str:
        return self.pipeline.name

    @property
    def pipeline_counter(self) -> str:
        return self.pipeline.counter

    @property
    def stage_name(self) -> str:
        return self.pipeline.stage.name

    @property
    def stage_counter(self) -> str:
        return self.pipeline.stage.counter

    def fully_qualified_job_name(self) -> str:
        return f"{self.pipeline_name}/{self.pipeline_counter}/{self.stage_name}/{self.stage_counter}"

    def go_server_url(self, host: str) -> str:
        """Link to this stage run on the GoCD dashboard."""
        return (
            f"{host.rstrip('/')}/go/pipelines/{self.pipeline_name}/"
            f"{self.pipeline_counter}/{self.stage_name}/{self.stage_counter}"
        )

    def fetch_details(self, rules: Rules, server: Optional[GoServer] = None) -> Pipeline:
        """Fetch the pipeline run this notification refers to from GoCD."""
        server = server or GoServer(rules)
        history = server.pipeline_history(self.pipeline_name)
        if not history:
            raise DetailsNotFound(self.pipeline_name, self.pipeline_counter, "empty history")

        for pipeline in history:
            if str(pipeline.counter) == self.pipeline_counter:
                return pipeline
        raise DetailsNotFound(self.pipeline_name, self.pipeline_counter)

    def pick_current_stage(self, stages: list[Stage]) -> Stage:
        for stage in stages:
            if stage.name == self.stage_name:
                return stage
        raise DetailsNotFound(
            self.pipeline_name,
            self.pipeline_counter,
            f"stage {self.stage_name} missing from pipeline",
        )
