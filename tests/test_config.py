"""Tests for gocd_teams.core configuration module."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from gocd_teams.core import (
    CONFIG_ENV_VAR,
    GO_TEAMS_CONFIG_FILE,
    GO_TEAMS_HOME,
    GRAPH_BASE_URL,
    PipelineRule,
    Rules,
    config_path,
    load_rules,
    save_rules,
)


class TestPathConstants:
    def test_config_file_in_home(self):
        assert GO_TEAMS_CONFIG_FILE.parent == GO_TEAMS_HOME
        assert GO_TEAMS_CONFIG_FILE.name == "config.yaml"


class TestRules:
    def test_defaults(self):
        rules = Rules()
        assert rules.enabled is True
        assert rules.webhook_url == ""
        assert rules.graph_base_url == GRAPH_BASE_URL
        assert rules.timeout == 30.0
        assert rules.pipeline_rules == []

    def test_rules_are_immutable(self):
        rule = PipelineRule(team="t", channel="c")
        with pytest.raises(ValidationError):
            rule.team = "other"

    def test_nested_rules(self):
        rules = Rules(pipeline_rules=[{"team": "t1", "channel": "Builds", "statuses": ["failed"]}])
        assert rules.pipeline_rules[0].channel == "Builds"
        assert rules.pipeline_rules[0].name_regex == ".*"


class TestConfigPath:
    def test_explicit_path_wins(self, temp_dir, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.yaml"))
        assert config_path(temp_dir / "explicit.yaml") == temp_dir / "explicit.yaml"

    def test_env_var(self, temp_dir, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.yaml"))
        assert config_path() == temp_dir / "env.yaml"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert config_path() == GO_TEAMS_CONFIG_FILE


class TestLoadSave:
    def test_missing_file_gives_defaults(self, temp_dir):
        assert load_rules(temp_dir / "nope.yaml") == Rules()

    def test_round_trip(self, temp_dir):
        path = temp_dir / "nested" / "config.yaml"
        rules = Rules(
            webhook_url="tok",
            go_server_host="https://go.example",
            pipeline_rules=[PipelineRule(team="t1", channel="19:x@thread.tacv2")],
        )
        save_rules(rules, path)
        assert path.exists()
        assert load_rules(path) == rules

    def test_load_yaml(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text(yaml.dump({
            "webhook_url": "tok",
            "go_api_user": "admin",
            "pipeline_rules": [{"team": "t1", "channel": "Builds"}],
        }))
        rules = load_rules(path)
        assert rules.webhook_url == "tok"
        assert rules.go_api_user == "admin"
        assert rules.pipeline_rules[0].team == "t1"

    def test_malformed_file_gives_defaults(self, temp_dir, caplog):
        path = temp_dir / "config.yaml"
        path.write_text("pipeline_rules: 42\n")
        assert load_rules(path) == Rules()
        assert "Ignoring unreadable config file" in caplog.text

    def test_empty_file(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("")
        assert load_rules(path) == Rules()
