"""Data models for transcript events, tracked tasks and usage estimates."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TaskStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class TextBlock:
    text: str


@dataclass
class ToolUse:
    id: str
    name: str
    input: dict = field(default_factory=dict)


@dataclass
class OpaqueBlock:
    """Any content block the tracker has no use for (images, thinking, ...)."""
    type: str


@dataclass
class ToolResult:
    tool_use_id: str | None
    content: list = field(default_factory=list)

    @property
    def text(self) -> str:
        """Plain text of the result: the first textual sub-block, or ''."""
        for block in self.content:
            if isinstance(block, TextBlock):
                return block.text
        return ""


ContentBlock = TextBlock | ToolUse | ToolResult | OpaqueBlock


@dataclass
class Event:
    timestamp: datetime | None = None
    blocks: list[ContentBlock] = field(default_factory=list)


@dataclass
class Task:
    id: str
    start_time: datetime
    type: str = "unknown"
    model: str | None = None
    description: str | None = None
    status: TaskStatus = TaskStatus.RUNNING
    end_time: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self.status == TaskStatus.RUNNING

    def complete(self, end_time: datetime) -> bool:
        """Move a running task to completed. Completed is terminal."""
        if not self.is_running:
            return False
        self.status = TaskStatus.COMPLETED
        self.end_time = end_time
        return True


@dataclass
class SkillActivation:
    name: str
    timestamp: datetime
    args: str | None = None


@dataclass
class TranscriptView:
    agents: list[Task] = field(default_factory=list)
    session_start: datetime | None = None
    last_activated_skill: SkillActivation | None = None
    # Background launches whose result text carried no agent id
    uncorrelated_launches: list[str] = field(default_factory=list)
    # Completion reports for agent ids never seen at launch
    orphan_completions: list[str] = field(default_factory=list)

    @property
    def running_agents(self) -> list[Task]:
        return [a for a in self.agents if a.is_running]


@dataclass
class UsageSnapshot:
    """The JSON payload the host passes on stdin."""
    model: dict = field(default_factory=dict)
    context_window: dict = field(default_factory=dict)
    transcript_path: str | None = None
    session_id: str | None = None
    cwd: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "UsageSnapshot":
        model = data.get("model")
        context_window = data.get("context_window")
        transcript_path = data.get("transcript_path")
        return cls(
            model=model if isinstance(model, dict) else {},
            context_window=context_window if isinstance(context_window, dict) else {},
            transcript_path=transcript_path if isinstance(transcript_path, str) else None,
            session_id=data.get("session_id"),
            cwd=data.get("cwd"),
        )

    @property
    def current_usage(self) -> dict | None:
        usage = self.context_window.get("current_usage")
        return usage if isinstance(usage, dict) else None


@dataclass
class UsageEstimate:
    model_name: str = "Unknown"
    total_tokens: int = 0
    context_percent: int = 0
    cost: float = 0.0
    has_usage: bool = False
