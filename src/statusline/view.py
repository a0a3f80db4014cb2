"""Reconstruct a renderable view of a session from its transcript."""

import logging
from pathlib import Path

from statusline.config import EngineConfig
from statusline.decoder import decode_event
from statusline.models import TranscriptView
from statusline.reader import iter_transcript_lines
from statusline.tracker import Clock, TaskTracker, utc_now

logger = logging.getLogger("statusline.view")


def build_view(tracker: TaskTracker) -> TranscriptView:
    """Select at most `view_limit` tasks: running first, then latest completed."""
    limit = tracker.config.view_limit
    running = [t for t in tracker.tasks if t.is_running]
    completed = [t for t in tracker.tasks if not t.is_running]

    free_slots = limit - len(running)
    agents = running + (completed[-free_slots:] if free_slots > 0 else [])

    return TranscriptView(
        agents=agents[:limit],
        session_start=tracker.session_start,
        last_activated_skill=tracker.last_activated_skill,
        uncorrelated_launches=tracker.uncorrelated_launches[-limit:],
        orphan_completions=tracker.orphan_completions[-limit:],
    )


def parse_transcript(path: str | Path | None,
                     config: EngineConfig | None = None,
                     clock: Clock = utc_now) -> TranscriptView:
    """Run the full pass: lines -> events -> tracker -> stale sweep -> view.

    Never raises for a missing or unreadable transcript; the result is then
    an empty view.
    """
    config = config or EngineConfig()
    tracker = TaskTracker(config, clock=clock)

    decoded = skipped = 0
    for line in iter_transcript_lines(path, config.max_tail_bytes):
        event = decode_event(line)
        if event is None:
            if line.strip():
                skipped += 1
            continue
        decoded += 1
        tracker.process(event)

    tracker.sweep_stale(clock())
    logger.debug("Parsed %s: %d events, %d malformed lines, %d tasks tracked",
                 path, decoded, skipped, len(tracker.tasks))
    return build_view(tracker)
