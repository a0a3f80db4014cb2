"""Statusline CLI: session status for Claude Code from its transcript."""

import json
import logging
import sys
from datetime import timedelta
from pathlib import Path

import click

from statusline.config import EngineConfig, MAX_TAIL_BYTES, parse_tool_names
from statusline.formatting import (
    format_status, format_status_json,
    format_view_compact, format_view_json,
)
from statusline.models import UsageSnapshot
from statusline.pricing import estimate_usage
from statusline.tracker import utc_now
from statusline.view import parse_transcript


def _read_stdin_snapshot() -> UsageSnapshot | None:
    """Read the host's JSON payload from stdin. None if absent or invalid."""
    if sys.stdin is None or sys.stdin.isatty():
        return None
    raw = sys.stdin.read()
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return UsageSnapshot.from_dict(data)


def _build_config(max_tail_bytes, stale_minutes, task_tools, skill_tools) -> EngineConfig:
    config = EngineConfig.from_env()
    if max_tail_bytes:
        config.max_tail_bytes = max_tail_bytes
    if stale_minutes:
        config.stale_after = timedelta(minutes=stale_minutes)
    if task_tools:
        config.task_tool_names = parse_tool_names(task_tools)
    if skill_tools:
        config.skill_tool_names = parse_tool_names(skill_tools)
    return config


def engine_options(f):
    """Options shared by commands that parse a transcript."""
    options = [
        click.option("--max-tail-bytes", type=click.IntRange(min=1), default=None,
                     envvar="STATUSLINE_MAX_TAIL_BYTES",
                     help=f"Read at most this many bytes from the end (default: {MAX_TAIL_BYTES})"),
        click.option("--stale-minutes", type=click.IntRange(min=1), default=None,
                     envvar="STATUSLINE_STALE_MINUTES",
                     help="Treat agents running longer than this as finished (default: 30)"),
        click.option("--task-tools", default=None, envvar="STATUSLINE_TASK_TOOLS",
                     help="Comma-separated tool names that spawn agents"),
        click.option("--skill-tools", default=None, envvar="STATUSLINE_SKILL_TOOLS",
                     help="Comma-separated tool names that activate skills"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr")
@click.pass_context
def cli(ctx, verbose):
    """Statusline: compact session status for Claude Code."""
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@cli.command()
@click.argument("transcript", required=False)
@engine_options
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
def render(transcript, max_tail_bytes, stale_minutes, task_tools, skill_tools, fmt):
    """Render the status line. Reads the session JSON from stdin."""
    snapshot = _read_stdin_snapshot()
    if snapshot is None:
        click.echo("No stdin data provided", err=True)
        sys.exit(1)

    config = _build_config(max_tail_bytes, stale_minutes, task_tools, skill_tools)
    view = parse_transcript(transcript or snapshot.transcript_path, config)
    estimate = estimate_usage(snapshot)

    if fmt == "json":
        click.echo(format_status_json(view, estimate))
    else:
        click.echo(format_status(view, estimate, utc_now()))


@cli.command()
@click.argument("transcript", type=click.Path(dir_okay=False, path_type=Path))
@engine_options
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
def agents(transcript, max_tail_bytes, stale_minutes, task_tools, skill_tools, fmt):
    """Show the agents reconstructed from a transcript."""
    config = _build_config(max_tail_bytes, stale_minutes, task_tools, skill_tools)
    view = parse_transcript(transcript, config)

    if fmt == "json":
        click.echo(format_view_json(view))
    else:
        click.echo(format_view_compact(view))


# --- Hook management (user-facing) ---

@cli.group()
def hooks():
    """Manage the Claude Code status line and hooks."""
    pass


@hooks.command()
@click.option("--project", "-p", default=".", help="Project directory")
def install(project):
    """Install the status line and context-sync hook for a project."""
    from statusline.hooks import install_hooks
    result = install_hooks(Path(project).resolve())
    click.echo(result["message"])


# --- Hook handlers (internal, called by Claude Code) ---

@cli.group(hidden=True)
def hook():
    """Internal hook handlers invoked by Claude Code."""
    pass


@hook.command("context-sync")
@click.option("--claude-dir", default=None, type=click.Path(path_type=Path),
              help="State directory (default: ~/.claude)")
def hook_context_sync(claude_dir):
    """Count a tool use and remind to sync context every few actions."""
    from statusline.hooks import handle_context_sync
    message = handle_context_sync(claude_dir or Path.home() / ".claude")
    if message:
        click.echo(message, err=True)
