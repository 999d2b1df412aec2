"""
TeamsPipelineListener — posts GoCD stage events to a Teams channel.

Each lifecycle callback resolves the destination from the rule, fetches
build details from GoCD, formats the message and posts it through Graph.
Failures are never handled here; they propagate to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from gocd_teams.core import PipelineRule, Rules
from gocd_teams.notifications.credentials import GraphClient, new_client
from gocd_teams.notifications.directory import resolve_channel
from gocd_teams.notifications.events import (
    GoNotificationMessage,
    PipelineStatus,
    callback_status,
)
from gocd_teams.notifications.formatter import ChatMessage, format_notification
from gocd_teams.notifications.gocd import GoServer

logger = logging.getLogger(__name__)


class TeamsPipelineListener:
    """Dispatches pipeline lifecycle events to Microsoft Teams."""

    def __init__(
        self,
        rules: Rules,
        *,
        client: Optional[GraphClient] = None,
        server: Optional[GoServer] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.rules = rules
        self.logger = log or logger
        self.server = server or GoServer(rules)
        self._owns_client = client is None
        self.client = client or new_client(
            rules.webhook_url,
            base_url=rules.graph_base_url,
            timeout=rules.timeout,
            log=self.logger,
        )

    def notify(self, rule: PipelineRule, message: GoNotificationMessage, status: PipelineStatus) -> None:
        self._send_message(rule, message, status)

    def handle(self, callback: str, rule: PipelineRule, message: GoNotificationMessage) -> None:
        """Dispatch by host callback name, e.g. ``onPassed`` or ``on_passed``."""
        self.notify(rule, message, callback_status(callback))

    def on_building(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.BUILDING)

    def on_passed(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.PASSED)

    def on_failed(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.FAILED)

    def on_broken(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.BROKEN)

    def on_fixed(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.FIXED)

    def on_cancelled(self, rule: PipelineRule, message: GoNotificationMessage) -> None:
        self.notify(rule, message, PipelineStatus.CANCELLED)

    def close(self) -> None:
        """Release the Graph client, unless the caller supplied it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "TeamsPipelineListener":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def build_message(self, message: GoNotificationMessage, status: PipelineStatus) -> ChatMessage:
        """Fetch build details from GoCD and render the chat message."""
        details = message.fetch_details(self.rules, self.server)
        stage = message.pick_current_stage(details.stages)
        return format_notification(message, status, details, stage, self.rules.go_server_host)

    def _send_message(self, rule: PipelineRule, message: GoNotificationMessage, status: PipelineStatus) -> None:
        team_id = self._team_id(rule)
        channel_id = resolve_channel(self.client, team_id, rule.channel, log=self.logger)
        chat_message = self.build_message(message, status)
        self.client.post_channel_message(team_id, channel_id, chat_message.to_payload())
        self.logger.debug("Posted %r to %s/%s", chat_message.subject, team_id, channel_id)

    def _team_id(self, rule: PipelineRule) -> str:
        team_id = rule.team
        self.logger.info("Using Team ID: %s", team_id)
        return team_id
