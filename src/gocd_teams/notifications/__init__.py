"""
Teams notifications for GoCD pipelines.

Resolves the Teams channel configured for a pipeline rule and posts an
HTML message for each stage lifecycle event.
"""

from gocd_teams.notifications.credentials import GraphClient, StaticTokenCredential, new_client
from gocd_teams.notifications.directory import resolve_channel
from gocd_teams.notifications.errors import (
    AuthError,
    ChannelIdMissing,
    ChannelNotFound,
    DetailsNotFound,
    TeamNotFound,
    TeamsNotifierError,
)
from gocd_teams.notifications.events import GoNotificationMessage, PipelineStatus
from gocd_teams.notifications.formatter import ChatMessage, format_message
from gocd_teams.notifications.listener import TeamsPipelineListener

__all__ = [
    "AuthError",
    "ChannelIdMissing",
    "ChannelNotFound",
    "ChatMessage",
    "DetailsNotFound",
    "GoNotificationMessage",
    "GraphClient",
    "PipelineStatus",
    "StaticTokenCredential",
    "TeamNotFound",
    "TeamsNotifierError",
    "TeamsPipelineListener",
    "format_message",
    "new_client",
    "resolve_channel",
]
