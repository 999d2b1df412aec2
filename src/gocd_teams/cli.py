"""
CLI — manual entry points for the Teams notifier.

Commands:
    gocd-teams whoami            — Verify the Graph token
    gocd-teams rules             — List configured pipeline rules
    gocd-teams resolve-channel   — Resolve a channel name to its id
    gocd-teams preview           — Render the message for a GoCD notification
    gocd-teams notify            — Post a GoCD notification to Teams
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.markup import escape

from gocd_teams import __version__

console = Console()


def _fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(1)


def _load(ctx: click.Context):
    from gocd_teams.core import load_rules

    return load_rules(ctx.obj.get("config"))


def _read_message(path: str):
    from gocd_teams.notifications.events import GoNotificationMessage

    return GoNotificationMessage.model_validate(json.loads(Path(path).read_text()))


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Config YAML (defaults to $GO_TEAMS_NOTIFY_CONF or ~/.gocd-teams/config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """gocd-teams — post GoCD pipeline events to Microsoft Teams."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Check the configured token against Graph."""
    from gocd_teams.notifications.credentials import new_client
    from gocd_teams.notifications.errors import TeamsNotifierError

    rules = _load(ctx)
    try:
        with new_client(rules.webhook_url, base_url=rules.graph_base_url, timeout=rules.timeout) as client:
            identity = client.me()
    except (TeamsNotifierError, httpx.HTTPError) as exc:
        _fail(str(exc))
        return
    console.print(f"[green]>[/green] Authenticated as [bold]{identity.get('userPrincipalName')}[/bold]")


@main.command(name="rules")
@click.pass_context
def rules_list(ctx: click.Context) -> None:
    """Show configured pipeline rules."""
    rules = _load(ctx)

    if not rules.enabled:
        console.print("[dim]Notifications are disabled.[/dim]")
        return

    console.print(f"\n[bold]Pipeline rules[/bold] (GoCD: {rules.go_server_host})\n")
    if not rules.pipeline_rules:
        console.print("[dim]  No rules configured.[/dim]")
        return

    for i, rule in enumerate(rules.pipeline_rules):
        statuses = ", ".join(rule.statuses) if rule.statuses else "all statuses"
        console.print(
            f"  \\[{i}] [bold]{escape(rule.name_regex)}[/bold] / {escape(rule.stage_regex)} "
            f"→ team {rule.team}, channel {escape(rule.channel)} — {statuses}"
        )


@main.command(name="resolve-channel")
@click.argument("team")
@click.argument("channel")
@click.pass_context
def resolve_channel_cmd(ctx: click.Context, team: str, channel: str) -> None:
    """Resolve CHANNEL (name or id) within TEAM to a channel id."""
    from gocd_teams.notifications.credentials import new_client
    from gocd_teams.notifications.directory import resolve_channel
    from gocd_teams.notifications.errors import TeamsNotifierError

    rules = _load(ctx)
    try:
        with new_client(rules.webhook_url, base_url=rules.graph_base_url, timeout=rules.timeout) as client:
            channel_id = resolve_channel(client, team, channel)
    except (TeamsNotifierError, httpx.HTTPError) as exc:
        _fail(str(exc))
        return
    console.print(channel_id)


@main.command()
@click.argument("message_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--status", "-s", required=True, help="building, passed, failed, broken, fixed or cancelled")
@click.pass_context
def preview(ctx: click.Context, message_file: str, status: str) -> None:
    """Render the Teams message for a GoCD notification without sending it."""
    from gocd_teams.notifications.errors import TeamsNotifierError
    from gocd_teams.notifications.events import PipelineStatus
    from gocd_teams.notifications.formatter import format_notification

    rules = _load(ctx)
    try:
        pipeline_status = PipelineStatus.parse(status)
        message = _read_message(message_file)
        details = message.fetch_details(rules)
        stage = message.pick_current_stage(details.stages)
        chat = format_notification(message, pipeline_status, details, stage, rules.go_server_host)
    except (TeamsNotifierError, httpx.HTTPError, ValueError) as exc:
        _fail(str(exc))
        return
    console.print(f"\n[bold]{escape(chat.subject)}[/bold]")
    console.print(escape(chat.body.content), soft_wrap=True)


@main.command()
@click.argument("message_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--status", "-s", required=True, help="building, passed, failed, broken, fixed or cancelled")
@click.option("--rule-index", "-r", type=int, default=0, show_default=True, help="Which configured rule to send with")
@click.pass_context
def notify(ctx: click.Context, message_file: str, status: str, rule_index: int) -> None:
    """Post a GoCD stage notification to Teams."""
    from gocd_teams.notifications.errors import TeamsNotifierError
    from gocd_teams.notifications.events import PipelineStatus
    from gocd_teams.notifications.listener import TeamsPipelineListener

    rules = _load(ctx)
    if not rules.enabled:
        console.print("[dim]Notifications are disabled.[/dim]")
        return
    if not 0 <= rule_index < len(rules.pipeline_rules):
        _fail(f"No rule at index {rule_index} ({len(rules.pipeline_rules)} configured)")
        return

    try:
        pipeline_status = PipelineStatus.parse(status)
        message = _read_message(message_file)
        with TeamsPipelineListener(rules) as listener:
            listener.notify(rules.pipeline_rules[rule_index], message, pipeline_status)
    except (TeamsNotifierError, httpx.HTTPError, ValueError) as exc:
        _fail(str(exc))
        return
    console.print(f"[green]>[/green] Sent {pipeline_status!s} notification for {message.fully_qualified_job_name()}")


if __name__ == "__main__":
    main()
