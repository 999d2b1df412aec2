"""
Exceptions raised while delivering a pipeline notification to Teams.

Nothing here is caught inside the library: every error propagates to the
caller (the host plugin, or the CLI).
"""

from __future__ import annotations


class TeamsNotifierError(Exception):
    """Base class for notifier failures."""


class AuthError(TeamsNotifierError):
    """The Graph API rejected the configured token."""


class TeamNotFound(TeamsNotifierError):
    """The channel listing for a team returned no result set."""

    def __init__(self, team_id: str) -> None:
        super().__init__(f"Error finding team: {team_id}")
        self.team_id = team_id


class ChannelNotFound(TeamsNotifierError):
    """No channel in the team has the configured display name."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"Channel not found: {channel}")
        self.channel = channel


class ChannelIdMissing(TeamsNotifierError):
    """A channel matched by name came back without an id."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"Channel ID not found for: {channel}")
        self.channel = channel


class DetailsNotFound(TeamsNotifierError):
    """GoCD has no build details for the pipeline run or stage."""

    def __init__(self, pipeline: str, counter: int | str = "", reason: str = "") -> None:
        message = f"No build details found for {pipeline}"
        if counter != "":
            message += f"/{counter}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.pipeline = pipeline
        self.counter = counter
