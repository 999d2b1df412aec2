"""
Channel resolution — turns a configured channel into a Graph channel id.

Teams channel ids look like ``19:abc...@thread.tacv2``; anything with a
colon is taken to be an id already. Everything else is treated as a
display name and looked up in the team's channel list on every call.
"""

from __future__ import annotations

import logging

from gocd_teams.notifications.credentials import GraphClient
from gocd_teams.notifications.errors import ChannelIdMissing, ChannelNotFound, TeamNotFound

logger = logging.getLogger(__name__)


def is_channel_id(channel_setting: str) -> bool:
    return ":" in channel_setting


def resolve_channel(
    client: GraphClient,
    team_id: str,
    channel_setting: str,
    *,
    log: logging.Logger | None = None,
) -> str:
    """Return the channel id for ``channel_setting`` within ``team_id``."""
    log = log or logger
    if is_channel_id(channel_setting):
        log.info("The configured channel was detected as an ID: %s", channel_setting)
        return channel_setting

    channels = client.list_channels(team_id)
    if channels is None:
        raise TeamNotFound(team_id)

    match = next(
        (ch for ch in channels if ch.get("displayName") == channel_setting),
        None,
    )
    if match is None:
        raise ChannelNotFound(channel_setting)

    channel_id = match.get("id")
    if not channel_id:
        raise ChannelIdMissing(channel_setting)

    log.info("Using Channel ID: %s", channel_id)
    return channel_id
