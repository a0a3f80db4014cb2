"""Shared fixtures for statusline tests."""

import json
from datetime import datetime, timezone

import pytest

NOW = datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def task_use(tool_id, description=None, subagent_type="general-purpose",
             model=None, timestamp=None, name="Task"):
    """Transcript record for an assistant message invoking a Task tool."""
    payload = {"prompt": "do it"}
    if description is not None:
        payload["description"] = description
    if subagent_type is not None:
        payload["subagent_type"] = subagent_type
    if model is not None:
        payload["model"] = model
    record = {
        "type": "assistant",
        "message": {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": tool_id, "name": name, "input": payload}],
        },
    }
    if timestamp is not None:
        record["timestamp"] = iso(timestamp)
    return record


def tool_result(tool_use_id, content, timestamp=None):
    """Transcript record for a user message carrying one tool result."""
    record = {
        "type": "user",
        "message": {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": tool_use_id, "content": content}],
        },
    }
    if timestamp is not None:
        record["timestamp"] = iso(timestamp)
    return record


def skill_use(tool_id, skill, args=None, timestamp=None, name="Skill"):
    payload = {"skill": skill}
    if args is not None:
        payload["args"] = args
    record = {
        "type": "assistant",
        "message": {"content": [{"type": "tool_use", "id": tool_id, "name": name, "input": payload}]},
    }
    if timestamp is not None:
        record["timestamp"] = iso(timestamp)
    return record


@pytest.fixture
def clock():
    """Fixed clock at NOW."""
    return lambda: NOW


@pytest.fixture
def write_transcript(tmp_path):
    """Write records (dicts or raw strings) as a JSONL transcript."""
    def _write(records, name="transcript.jsonl"):
        path = tmp_path / name
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
