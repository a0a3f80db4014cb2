"""Tests for engine configuration."""

from datetime import timedelta

from statusline.config import EngineConfig, parse_tool_names


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.max_tail_bytes == 512 * 1024
        assert config.max_tasks == 100
        assert config.stale_after == timedelta(minutes=30)
        assert config.view_limit == 10
        assert config.task_tool_names == {"Task", "proxy_Task"}
        assert config.skill_tool_names == {"Skill", "proxy_Skill"}

    def test_from_env_overrides(self):
        config = EngineConfig.from_env({
            "STATUSLINE_MAX_TAIL_BYTES": "2048",
            "STATUSLINE_MAX_TASKS": "5",
            "STATUSLINE_STALE_MINUTES": "10",
            "STATUSLINE_TASK_TOOLS": "Task, Agent",
            "STATUSLINE_SKILL_TOOLS": "Skill",
        })
        assert config.max_tail_bytes == 2048
        assert config.max_tasks == 5
        assert config.stale_after == timedelta(minutes=10)
        assert config.task_tool_names == {"Task", "Agent"}
        assert config.skill_tool_names == {"Skill"}

    def test_bad_values_keep_defaults(self, caplog):
        config = EngineConfig.from_env({
            "STATUSLINE_MAX_TAIL_BYTES": "lots",
            "STATUSLINE_MAX_TASKS": "-1",
            "STATUSLINE_TASK_TOOLS": " , ",
        })
        assert config.max_tail_bytes == 512 * 1024
        assert config.max_tasks == 100
        assert config.task_tool_names == {"Task", "proxy_Task"}
        assert "STATUSLINE_MAX_TAIL_BYTES" in caplog.text

    def test_empty_env(self):
        assert EngineConfig.from_env({}) == EngineConfig()


def test_parse_tool_names():
    assert parse_tool_names("a,b , ,c") == {"a", "b", "c"}
    assert parse_tool_names("") == frozenset()
