"""Output formatters for the status line and reconstructed views."""

import json
from dataclasses import asdict
from datetime import datetime

import click

from statusline.models import SkillActivation, Task, TranscriptView, UsageEstimate
from statusline.pricing import round_half_up

STATUS = "ok"


def format_cost(cost: float) -> str:
    return f"${cost:.4f}"


def cost_color(cost: float) -> str:
    """Terminal color for a cost: green under $1, yellow under $5, else red."""
    if cost < 1:
        return "green"
    if cost < 5:
        return "yellow"
    return "red"


def format_duration(session_start: datetime | None, now: datetime) -> str:
    """Elapsed session time like '42m', '1h', '2h5m'."""
    if session_start is None:
        return "0m"
    minutes = int((now - session_start).total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h{mins}m" if mins > 0 else f"{hours}h"


def format_context_size(tokens: int) -> str:
    if not tokens:
        return "0"
    return f"{round_half_up(tokens / 1024)}K"


def format_skill(skill: SkillActivation | None) -> str:
    if skill is None:
        return ""
    args = f"({skill.args})" if skill.args else ""
    return f"skill:{skill.name}{args}"


def _agent_label(task: Task) -> str:
    return task.description or task.type or "unknown"


def format_status_line(view: TranscriptView, estimate: UsageEstimate,
                       now: datetime) -> str:
    """Single status line: duration | status | cost | context | agent | skill."""
    if estimate.has_usage:
        cost = click.style(format_cost(estimate.cost), fg=cost_color(estimate.cost))
    else:
        cost = "$0.00"

    running = view.running_agents
    current_agent = _agent_label(running[0]) if running else ""
    skill = format_skill(view.last_activated_skill)

    parts = [
        click.style(format_duration(view.session_start, now), dim=True),
        STATUS,
        cost,
        f"{format_context_size(estimate.total_tokens)} @ {estimate.context_percent}%",
        click.style(current_agent, fg="cyan") if current_agent else "",
        click.style(skill, fg="magenta") if skill else "",
    ]
    return " | ".join(p for p in parts if p)


def format_agent_tree(tasks: list[Task]) -> str:
    """Tree block listing background agents, two lines per agent."""
    lines = []
    for i, task in enumerate(tasks):
        is_last = i == len(tasks) - 1
        prefix = "└─ " if is_last else "├─ "
        continuation = "   " if is_last else "│  "
        state = "Running" if task.is_running else "Done"
        lines.append(f"{prefix}{_agent_label(task)} · ? tool uses · 0 tokens")
        lines.append(f"{continuation}⎿ {state}")
    return "\n".join(lines)


def format_status(view: TranscriptView, estimate: UsageEstimate, now: datetime) -> str:
    """Status line, followed by the tree of extra running agents if any."""
    output = format_status_line(view, estimate, now)
    background = view.running_agents[1:]
    if background:
        output = f"{output}\n{format_agent_tree(background)}"
    return output


def _short_timestamp(ts: datetime | None) -> str:
    if ts is None:
        return "-"
    return ts.isoformat()[:16].replace("T", " ")


def format_agent_compact(task: Task) -> str:
    """Single-line compact format for one tracked agent."""
    model = f" ({task.model})" if task.model else ""
    end = f" -> {_short_timestamp(task.end_time)}" if task.end_time else ""
    return (f"[{task.status.value}] [{_short_timestamp(task.start_time)}{end}] "
            f"{task.type}{model} — {_agent_label(task)}")


def format_view_compact(view: TranscriptView) -> str:
    lines = [f"Session start: {_short_timestamp(view.session_start)}"]
    skill = format_skill(view.last_activated_skill)
    if skill:
        lines.append(f"Last skill:    {skill}")
    if view.agents:
        lines.extend(format_agent_compact(a) for a in view.agents)
    else:
        lines.append("(no agents)")
    return "\n".join(lines)


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def format_view_json(view: TranscriptView) -> str:
    """JSON output for a reconstructed view."""
    data = asdict(view)
    for agent in data["agents"]:
        agent["status"] = agent["status"].value
    return json.dumps(data, indent=2, default=_json_default)


def format_status_json(view: TranscriptView, estimate: UsageEstimate) -> str:
    """Combined view and usage estimate as JSON."""
    data = json.loads(format_view_json(view))
    data["usage"] = asdict(estimate)
    return json.dumps(data, indent=2)
