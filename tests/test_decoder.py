"""Tests for transcript line decoding."""

import json
from datetime import datetime, timezone

import pytest

from statusline.decoder import decode_blocks, decode_event, parse_timestamp
from statusline.models import OpaqueBlock, TextBlock, ToolResult, ToolUse


class TestDecodeEvent:

    def test_tool_use_block(self):
        line = json.dumps({
            "timestamp": "2026-02-23T10:00:00Z",
            "message": {"content": [{
                "type": "tool_use", "id": "toolu_1", "name": "Task",
                "input": {"description": "build docs"},
            }]},
        })
        event = decode_event(line)
        assert event.timestamp == datetime(2026, 2, 23, 10, 0, tzinfo=timezone.utc)
        assert event.blocks == [ToolUse("toolu_1", "Task", {"description": "build docs"})]

    def test_same_line_decodes_to_equal_events(self):
        line = json.dumps({
            "timestamp": "2026-02-23T10:00:00Z",
            "message": {"content": [
                {"type": "tool_result", "tool_use_id": "x", "content": [{"type": "text", "text": "hi"}]},
            ]},
        })
        assert decode_event(line) == decode_event(line)

    @pytest.mark.parametrize("line", [
        "", "   ", "{not json", '{"message": ', "[1, 2]", "42", '"text"', "null",
        "[" * 100000,
    ])
    def test_malformed_lines_yield_nothing(self, line):
        assert decode_event(line) is None

    def test_oversized_integer_does_not_raise(self):
        line = '{"n": ' + "1" * 5000 + "}"
        event = decode_event(line)
        # Rejected by the integer digit limit where the interpreter has one
        assert event is None or event.blocks == []

    def test_record_without_message(self):
        event = decode_event('{"type": "summary", "timestamp": "2026-02-23T10:00:00Z"}')
        assert event is not None
        assert event.blocks == []
        assert event.timestamp is not None

    def test_invalid_timestamp_is_absent(self):
        event = decode_event('{"timestamp": "yesterday", "message": {"content": []}}')
        assert event.timestamp is None

    def test_single_block_content(self):
        event = decode_event(json.dumps({
            "message": {"content": {"type": "tool_use", "id": "t1", "name": "Skill",
                                    "input": {"skill": "pdf"}}},
        }))
        assert event.blocks == [ToolUse("t1", "Skill", {"skill": "pdf"})]

    def test_string_content(self):
        event = decode_event('{"message": {"content": "hello"}}')
        assert event.blocks == [TextBlock("hello")]


class TestDecodeBlocks:

    def test_tool_use_missing_id_is_opaque(self):
        assert decode_blocks([{"type": "tool_use", "name": "Task"}]) == [OpaqueBlock("tool_use")]

    def test_tool_use_non_dict_input_becomes_empty(self):
        blocks = decode_blocks([{"type": "tool_use", "id": "a", "name": "Task", "input": "x"}])
        assert blocks == [ToolUse("a", "Task", {})]

    def test_unknown_and_junk_blocks(self):
        blocks = decode_blocks([{"type": "thinking", "thinking": "..."}, 7, None])
        assert blocks == [OpaqueBlock("thinking")]

    def test_tool_result_without_reference(self):
        blocks = decode_blocks([{"type": "tool_result", "content": "done"}])
        assert blocks == [ToolResult(None, [TextBlock("done")])]


class TestToolResultText:

    def test_plain_string(self):
        block = decode_blocks([{"type": "tool_result", "tool_use_id": "a", "content": "plain"}])[0]
        assert block.text == "plain"

    def test_first_text_sub_block(self):
        block = decode_blocks([{"type": "tool_result", "tool_use_id": "a", "content": [
            {"type": "image", "source": {}},
            {"type": "text", "text": "the text"},
        ]}])[0]
        assert block.text == "the text"

    def test_single_text_sub_block(self):
        block = decode_blocks([{"type": "tool_result", "tool_use_id": "a",
                                "content": {"type": "text", "text": "solo"}}])[0]
        assert block.text == "solo"

    def test_no_text(self):
        block = decode_blocks([{"type": "tool_result", "tool_use_id": "a",
                                "content": [{"type": "image"}]}])[0]
        assert block.text == ""
        block = decode_blocks([{"type": "tool_result", "tool_use_id": "a"}])[0]
        assert block.text == ""


class TestParseTimestamp:

    def test_zulu_suffix(self):
        assert parse_timestamp("2026-02-23T10:00:00.123Z") == datetime(
            2026, 2, 23, 10, 0, 0, 123000, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value, micros", [
        ("2026-02-23T10:00:00.1Z", 100000),
        ("2026-02-23T10:00:00.12345Z", 123450),
        ("2026-02-23T10:00:00.123456789Z", 123456),
    ])
    def test_any_fraction_length(self, value, micros):
        assert parse_timestamp(value) == datetime(
            2026, 2, 23, 10, 0, 0, micros, tzinfo=timezone.utc)

    def test_naive_assumed_utc(self):
        assert parse_timestamp("2026-02-23T10:00:00").tzinfo == timezone.utc

    def test_non_strings(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp(1700000000) is None
        assert parse_timestamp("") is None
