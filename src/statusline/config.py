"""Engine limits and tool-name matching, overridable from the environment."""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta

logger = logging.getLogger("statusline.config")

MAX_TAIL_BYTES = 512 * 1024
MAX_TASKS = 100
STALE_AFTER = timedelta(minutes=30)
VIEW_LIMIT = 10

TASK_TOOL_NAMES = frozenset({"Task", "proxy_Task"})
SKILL_TOOL_NAMES = frozenset({"Skill", "proxy_Skill"})

# Substring the host writes into a Task result when the agent was detached
BACKGROUND_MARKER = "Async agent launched"


@dataclass
class EngineConfig:
    max_tail_bytes: int = MAX_TAIL_BYTES
    max_tasks: int = MAX_TASKS
    stale_after: timedelta = STALE_AFTER
    view_limit: int = VIEW_LIMIT
    task_tool_names: frozenset[str] = field(default=TASK_TOOL_NAMES)
    skill_tool_names: frozenset[str] = field(default=SKILL_TOOL_NAMES)
    background_marker: str = BACKGROUND_MARKER

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "EngineConfig":
        """Build a config from STATUSLINE_* variables, defaults for the rest."""
        env = os.environ if environ is None else environ
        config = cls()

        max_tail = _positive_int(env, "STATUSLINE_MAX_TAIL_BYTES")
        if max_tail is not None:
            config.max_tail_bytes = max_tail
        max_tasks = _positive_int(env, "STATUSLINE_MAX_TASKS")
        if max_tasks is not None:
            config.max_tasks = max_tasks
        stale_minutes = _positive_int(env, "STATUSLINE_STALE_MINUTES")
        if stale_minutes is not None:
            config.stale_after = timedelta(minutes=stale_minutes)

        task_tools = parse_tool_names(env.get("STATUSLINE_TASK_TOOLS", ""))
        if task_tools:
            config.task_tool_names = task_tools
        skill_tools = parse_tool_names(env.get("STATUSLINE_SKILL_TOOLS", ""))
        if skill_tools:
            config.skill_tool_names = skill_tools
        return config


def parse_tool_names(value: str) -> frozenset[str]:
    """Parse a comma-separated tool name list."""
    return frozenset(name.strip() for name in value.split(",") if name.strip())


def _positive_int(env, key: str) -> int | None:
    raw = env.get(key)
    if raw is None or not str(raw).strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", key, raw)
        return None
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", key, raw)
        return None
    return value
