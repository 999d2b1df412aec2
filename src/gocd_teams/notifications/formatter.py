"""
Message formatting — builds the Teams chat message for a stage event.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

from gocd_teams.notifications.events import GoNotificationMessage, PipelineStatus
from gocd_teams.notifications.gocd import Pipeline, Stage

_WHITESPACE = re.compile(r"\s+")


class ItemBody(BaseModel):
    content_type: str = "html"
    content: str = ""


class ChatMessage(BaseModel):
    """Outbound channel message: a subject line and an HTML body."""

    subject: str
    body: ItemBody

    def to_payload(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "body": {"contentType": self.body.content_type, "content": self.body.content},
        }


def format_subject(job_name: str, status: PipelineStatus) -> str:
    return _WHITESPACE.sub(" ", f"Stage [{job_name}] {status.verb} {status!s}")


def format_message(
    job_name: str,
    status: PipelineStatus,
    server_url: str,
    approved_by: str,
    trigger_message: str,
) -> ChatMessage:
    content = (
        f'<a href="{server_url}">details</a>'
        f"<p>Triggered by: {approved_by}</p>"
        f"<p>Reason: {trigger_message}</p>"
    )
    return ChatMessage(
        subject=format_subject(job_name, status),
        body=ItemBody(content=content),
    )


def format_notification(
    message: GoNotificationMessage,
    status: PipelineStatus,
    details: Pipeline,
    stage: Stage,
    go_server_host: str,
) -> ChatMessage:
    """Format from a GoCD notification plus the fetched build details."""
    return format_message(
        job_name=message.fully_qualified_job_name(),
        status=status,
        server_url=message.go_server_url(go_server_host),
        approved_by=stage.approved_by or "",
        trigger_message=details.build_cause.trigger_message or "",
    )
