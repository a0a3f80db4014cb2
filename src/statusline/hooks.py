"""Claude Code hooks: context-sync counter and settings installation."""

import copy
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger("statusline.hooks")

STATE_FILE = "context-sync-state.json"
SYNC_INTERVAL = 15

SYNC_MESSAGE = (
    "\n[AUTO-SYNC] Context volume is high ({count} actions).\n"
    "[CCP TRIGGER] You are required to run the 'session-manager' skill now "
    "to save state before context compaction.\n"
)

STATUS_LINE_CONFIG = {
    "type": "command",
    "command": "statusline render",
}

HOOK_CONFIG = {
    "hooks": {
        "PreToolUse": [
            {
                "matcher": "*",
                "hooks": [{
                    "type": "command",
                    "command": "statusline hook context-sync",
                    "timeout": 5,
                }],
            },
        ],
    }
}


def _read_sync_count(state_path: Path) -> int:
    """Read the persisted action count; a corrupted file restarts from 0."""
    if not state_path.exists():
        return 0
    try:
        data = json.loads(state_path.read_text())
    except (ValueError, OSError):
        return 0
    count = data.get("count") if isinstance(data, dict) else None
    if isinstance(count, int) and not isinstance(count, bool):
        return count
    return 0


def _write_sync_count(state_path: Path, count: int) -> None:
    state = {
        "count": count,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }
    try:
        state_path.write_text(json.dumps(state))
    except OSError as e:
        # Non-fatal, the next call starts over from the old count
        logger.debug("Cannot write %s: %s", state_path, e)


def handle_context_sync(claude_dir: Path) -> str:
    """Count one action and return the sync reminder every SYNC_INTERVAL actions.

    Returns '' when nothing needs to be said. A missing claude_dir means
    there is nowhere to keep state, so nothing is counted.
    """
    if not claude_dir.is_dir():
        return ""

    state_path = claude_dir / STATE_FILE
    count = _read_sync_count(state_path) + 1
    _write_sync_count(state_path, count)

    if count > 0 and count % SYNC_INTERVAL == 0:
        return SYNC_MESSAGE.format(count=count)
    return ""


def install_hooks(project_dir: Path) -> dict:
    """Install the status line and context-sync hook into .claude/settings.json.

    Returns dict with 'message' and 'status' keys describing what happened.
    """
    claude_dir = project_dir / ".claude"
    settings_path = claude_dir / "settings.json"

    if settings_path.exists():
        try:
            settings = json.loads(settings_path.read_text())
        except (json.JSONDecodeError, OSError):
            settings = {}
    else:
        settings = {}
    if not isinstance(settings, dict):
        settings = {}

    changed = False
    if settings.get("statusLine") != STATUS_LINE_CONFIG:
        settings["statusLine"] = dict(STATUS_LINE_CONFIG)
        changed = True

    hooks = settings.setdefault("hooks", {})
    for event_name, hook_entries in HOOK_CONFIG["hooks"].items():
        entries = hooks.setdefault(event_name, [])
        existing_commands = {
            h.get("command", "")
            for entry in entries
            for h in entry.get("hooks", [])
        }
        for entry in hook_entries:
            if entry["hooks"][0]["command"] not in existing_commands:
                entries.append(copy.deepcopy(entry))
                changed = True

    if not changed:
        return {"message": "Statusline already installed.", "status": "exists"}

    claude_dir.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(settings, indent=2) + "\n")
    return {
        "message": f"Statusline installed in {settings_path}",
        "status": "installed",
    }
