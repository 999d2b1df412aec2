"""
Core configuration for gocd-teams.

Provides:
- Path constants (GO_TEAMS_HOME, GO_TEAMS_CONFIG_FILE)
- Configuration models (PipelineRule, Rules)
- Config loading/saving functions
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

GO_TEAMS_HOME: Path = Path.home() / ".gocd-teams"
GO_TEAMS_CONFIG_FILE: Path = GO_TEAMS_HOME / "config.yaml"
CONFIG_ENV_VAR = "GO_TEAMS_NOTIFY_CONF"

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


class PipelineRule(BaseModel):
    """Maps a pipeline/stage filter to a Teams destination."""

    model_config = ConfigDict(frozen=True)

    name_regex: str = ".*"
    stage_regex: str = ".*"
    group_regex: str = ".*"
    team: str = ""  # team id, used as-is
    channel: str = ""  # channel id (contains ':') or display name
    statuses: list[str] = Field(default_factory=list)  # matched by the rule engine, not here


class Rules(BaseModel):
    """Notifier settings shared by every rule."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    webhook_url: str = ""  # carries the Graph bearer token
    go_server_host: str = "http://localhost:8153"
    go_api_user: str = ""
    go_api_password: str = ""
    go_api_token: str = ""
    graph_base_url: str = GRAPH_BASE_URL
    timeout: float = 30.0  # seconds
    pipeline_rules: list[PipelineRule] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Config loading/saving
# ---------------------------------------------------------------------------


def config_path(path: Optional[Path] = None) -> Path:
    """Resolve the config file: explicit path, then $GO_TEAMS_NOTIFY_CONF, then the default."""
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return GO_TEAMS_CONFIG_FILE


def load_rules(path: Optional[Path] = None) -> Rules:
    """Load rules from YAML file, or return defaults."""
    target = config_path(path)
    if target.exists():
        try:
            data = yaml.safe_load(target.read_text()) or {}
            return Rules(**data)
        except Exception:
            logger.warning("Ignoring unreadable config file %s", target, exc_info=True)
    return Rules()


def save_rules(rules: Rules, path: Optional[Path] = None) -> None:
    """Save rules to YAML file."""
    target = config_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(yaml.dump(rules.model_dump(), default_flow_style=False))


__all__ = [
    "GO_TEAMS_HOME",
    "GO_TEAMS_CONFIG_FILE",
    "CONFIG_ENV_VAR",
    "GRAPH_BASE_URL",
    "PipelineRule",
    "Rules",
    "config_path",
    "load_rules",
    "save_rules",
]
