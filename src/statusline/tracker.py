"""Task lifecycle tracking over a single ordered pass of transcript events.

Sub-agents are spawned by Task tool invocations and normally finish when the
matching tool result arrives. Background agents are different: their first
result only confirms the launch and carries an external ``agentId``; the real
completion shows up later inside some other tool result as
``<task_id>...</task_id><status>completed</status>``. Those are joined in two
hops: external id -> invoking tool_use id -> Task.
"""

import logging
import re
from collections.abc import Callable, Iterator
from datetime import datetime, timezone

from statusline.config import EngineConfig
from statusline.models import Event, SkillActivation, Task, ToolResult, ToolUse

logger = logging.getLogger("statusline.tracker")

AGENT_ID_PATTERN = re.compile(r"agentId:\s*([a-zA-Z0-9-]+)")
TASK_ID_PATTERN = re.compile(r"<task_id>([^<]+)</task_id>")
STATUS_PATTERN = re.compile(r"<status>([^<]+)</status>")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def extract_agent_id(text: str) -> str | None:
    """Pull the background agent id out of a launch confirmation."""
    match = AGENT_ID_PATTERN.search(text)
    return match.group(1) if match else None


def parse_completion_report(text: str) -> tuple[str, str] | None:
    """Extract (task_id, status) from a task output report, if both present."""
    task_match = TASK_ID_PATTERN.search(text)
    status_match = STATUS_PATTERN.search(text)
    if task_match and status_match:
        return task_match.group(1), status_match.group(1)
    return None


class TaskTable:
    """Insertion-ordered task map capped at `capacity`.

    On overflow the earliest-started completed task is evicted. Running tasks
    are never evicted; with no completed task to drop the table grows past
    the cap instead.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._tasks: dict[str, Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._tasks

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def insert(self, task: Task) -> Task | None:
        """Insert or overwrite a task. Returns the evicted task, if any."""
        evicted = None
        if task.id not in self._tasks and len(self._tasks) >= self.capacity:
            evicted = self._evict_oldest_completed()
        self._tasks[task.id] = task
        return evicted

    def _evict_oldest_completed(self) -> Task | None:
        oldest = None
        for task in self._tasks.values():
            if task.is_running:
                continue
            if oldest is None or task.start_time < oldest.start_time:
                oldest = task
        if oldest is None:
            logger.debug("Task table full (%d) with no completed task; growing", len(self._tasks))
            return None
        del self._tasks[oldest.id]
        logger.debug("Evicted completed task %s started %s", oldest.id, oldest.start_time)
        return oldest


class TaskTracker:
    """Folds decoded events into tasks, correlation entries and session facts."""

    def __init__(self, config: EngineConfig | None = None, clock: Clock = utc_now):
        self.config = config or EngineConfig()
        self.clock = clock
        self.tasks = TaskTable(self.config.max_tasks)
        # external background agent id -> invoking tool_use id
        self.background_ids: dict[str, str] = {}
        self.session_start: datetime | None = None
        self.last_activated_skill: SkillActivation | None = None
        self.uncorrelated_launches: list[str] = []
        self.orphan_completions: list[str] = []

    def process(self, event: Event) -> None:
        timestamp = event.timestamp or self.clock()
        if self.session_start is None and event.timestamp is not None:
            self.session_start = event.timestamp

        for block in event.blocks:
            if isinstance(block, ToolUse):
                self._handle_tool_use(block, timestamp)
            elif isinstance(block, ToolResult):
                if block.tool_use_id is not None and block.tool_use_id in self.tasks:
                    self._handle_task_result(block, timestamp)
                self._handle_completion_report(block, timestamp)

    def _handle_tool_use(self, block: ToolUse, timestamp: datetime) -> None:
        if block.name in self.config.task_tool_names:
            payload = block.input
            subagent_type = payload.get("subagent_type")
            task = Task(
                id=block.id,
                type=subagent_type if isinstance(subagent_type, str) and subagent_type else "unknown",
                model=_optional_str(payload.get("model")),
                description=_optional_str(payload.get("description")),
                start_time=timestamp,
            )
            self.tasks.insert(task)
        elif block.name in self.config.skill_tool_names:
            skill = _optional_str(block.input.get("skill"))
            if skill:
                self.last_activated_skill = SkillActivation(
                    name=skill,
                    args=_optional_str(block.input.get("args")),
                    timestamp=timestamp,
                )

    def _handle_task_result(self, block: ToolResult, timestamp: datetime) -> None:
        task = self.tasks.get(block.tool_use_id)
        text = block.text
        if self.config.background_marker not in text:
            task.complete(timestamp)
            return

        # Launch confirmation only; the task keeps running
        agent_id = extract_agent_id(text)
        if agent_id is None:
            logger.debug("Background launch for %s has no agentId", task.id)
            _append_once(self.uncorrelated_launches, task.id)
            return
        if agent_id in self.background_ids:
            logger.debug("Agent id %s already mapped to %s; keeping it",
                         agent_id, self.background_ids[agent_id])
            return
        self.background_ids[agent_id] = task.id

    def _handle_completion_report(self, block: ToolResult, timestamp: datetime) -> None:
        report = parse_completion_report(block.text)
        if report is None:
            return
        agent_id, status = report
        if status != "completed":
            return

        task_id = self.background_ids.get(agent_id)
        if task_id is None:
            logger.debug("Completion for unknown background agent %s", agent_id)
            _append_once(self.orphan_completions, agent_id)
            return
        task = self.tasks.get(task_id)
        if task is not None and task.is_running:
            task.complete(timestamp)

    def sweep_stale(self, now: datetime | None = None) -> list[Task]:
        """Complete tasks running longer than the stale threshold.

        The end time is capped at start + threshold so abandoned agents show
        a fixed duration. Returns the swept tasks.
        """
        now = now or self.clock()
        threshold = self.config.stale_after
        swept = []
        for task in self.tasks:
            if task.is_running and now - task.start_time > threshold:
                task.complete(task.start_time + threshold)
                swept.append(task)
        if swept:
            logger.debug("Marked %d stale task(s) completed", len(swept))
        return swept


def _append_once(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _optional_str(value) -> str | None:
    return value if isinstance(value, str) and value else None
