"""Tests for claude_session_monitor.services.jsonl_parser."""

import json
from datetime import datetime, timezone

import pytest

from claude_session_monitor.services.jsonl_parser import (
    decode_content,
    extract_meta,
    extract_text_content,
    parse_line,
    parse_timestamp,
)
from claude_session_monitor.types.messages import (
    MessageType,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)


# ---------------------------------------------------------------------------
# 1. Type mapping
# ---------------------------------------------------------------------------

def test_user_string_content():
    line = '{"type":"user","timestamp":"2024-01-01T00:00:00Z","message":{"content":"hello"}}'
    msg = parse_line(line)
    assert msg.type == MessageType.USER
    assert msg.content == "hello"
    assert msg.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert msg.tokens_in is None
    assert msg.tokens_out is None


def test_assistant_with_usage():
    line = ('{"type":"assistant","timestamp":"2024-01-01T00:00:01Z",'
            '"message":{"content":"hi","usage":{"input_tokens":5,"output_tokens":3}}}')
    msg = parse_line(line)
    assert msg.type == MessageType.ASSISTANT
    assert msg.content == "hi"
    assert msg.tokens_in == 5
    assert msg.tokens_out == 3


def test_assistant_cache_tokens_count_as_input():
    line = json.dumps({
        "type": "assistant",
        "message": {
            "content": [{"type": "text", "text": "ok"}],
            "usage": {
                "input_tokens": 2,
                "cache_read_input_tokens": 100,
                "cache_creation_input_tokens": 30,
                "output_tokens": 7,
            },
        },
    })
    msg = parse_line(line)
    assert msg.tokens_in == 132
    assert msg.tokens_out == 7


def test_assistant_usage_without_output_tokens():
    line = json.dumps({"type": "assistant", "message": {"content": "x", "usage": {}}})
    msg = parse_line(line)
    assert msg.tokens_in == 0
    assert msg.tokens_out is None


def test_assistant_tool_use_becomes_tool_use_type():
    line = json.dumps({
        "type": "assistant",
        "message": {"content": [
            {"type": "text", "text": "  Let me look  "},
            {"type": "tool_use", "id": "toolu_1", "name": "Read", "input": {}},
        ]},
    })
    msg = parse_line(line)
    assert msg.type == MessageType.TOOL_USE
    assert msg.content == "Let me look\n[tool: Read]"


def test_progress_fixed_content():
    msg = parse_line('{"type":"progress"}')
    assert msg.type == MessageType.PROGRESS
    assert msg.content == "[progress]"


def test_unknown_type_is_other():
    msg = parse_line('{"type":"system","message":{"content":"ignored"}}')
    assert msg.type == MessageType.OTHER
    assert msg.content == "[system]"


@pytest.mark.parametrize("type_str", ["file-history-snapshot", "queue-operation"])
def test_skipped_types(type_str):
    assert parse_line(json.dumps({"type": type_str})) is None


# ---------------------------------------------------------------------------
# 2. Content extraction
# ---------------------------------------------------------------------------

def test_tagged_string_keeps_trailing_text():
    assert extract_text_content("<system-reminder>x</system-reminder> real text") == "real text"


def test_command_markup_collapses_and_is_dropped():
    content = "<command-name>/clear</command-name>"
    assert extract_text_content(content) == "[command]"
    assert parse_line(json.dumps({"type": "user", "message": {"content": content}})) is None


def test_local_command_markup_collapses():
    content = "<local-command-stdout></local-command-stdout>"
    assert extract_text_content(content) == "[command]"


def test_tagged_string_without_marker_returned_as_is():
    assert extract_text_content("  <b>bold</b>  ") == "<b>bold</b>"


def test_tool_result_block_rendered():
    content = [{"type": "tool_result", "tool_use_id": "toolu_1", "content": "file body"}]
    assert extract_text_content(content) == "[tool result]"


def test_tool_use_without_name():
    assert extract_text_content([{"type": "tool_use"}]) == "[tool: unknown]"


def test_blank_text_blocks_skipped():
    content = [{"type": "text", "text": "   "}, {"type": "image"}, "junk"]
    assert extract_text_content(content) == ""


def test_non_string_non_list_content_is_empty():
    assert extract_text_content(None) == ""
    assert extract_text_content({"text": "x"}) == ""


def test_decode_content_union():
    blocks = decode_content([
        {"type": "text", "text": "a"},
        {"type": "tool_use", "name": "Bash"},
        {"type": "tool_result"},
        {"type": "thinking", "thinking": "hmm"},
    ])
    assert blocks == [TextBlock("a"), ToolUseBlock("Bash"), ToolResultBlock()]


# ---------------------------------------------------------------------------
# 3. Retention rule
# ---------------------------------------------------------------------------

def test_empty_user_content_dropped():
    assert parse_line('{"type":"user","message":{"content":"   "}}') is None


def test_missing_message_dropped_for_user():
    assert parse_line('{"type":"user"}') is None


def test_malformed_json_dropped():
    assert parse_line("{not json") is None
    assert parse_line("") is None
    assert parse_line("[1, 2]") is None


def test_missing_type_dropped():
    assert parse_line('{"message":{"content":"x"}}') is None


# ---------------------------------------------------------------------------
# 4. Metadata extraction
# ---------------------------------------------------------------------------

def test_extract_meta_summary_line():
    meta = extract_meta('{"type":"summary","summary":"Refactor parser","leafUuid":"x"}')
    assert meta.summary == "Refactor parser"
    assert meta.git_branch is None
    assert meta.cwd is None
    assert meta.slug is None


def test_extract_meta_session_line():
    meta = extract_meta(json.dumps({
        "type": "user",
        "sessionId": "abc",
        "gitBranch": "feature/x",
        "cwd": "/repo",
        "slug": "quiet-fox",
    }))
    assert meta.git_branch == "feature/x"
    assert meta.cwd == "/repo"
    assert meta.slug == "quiet-fox"
    assert meta.summary is None


def test_extract_meta_requires_session_id():
    assert extract_meta('{"type":"user","gitBranch":"main"}') is None


def test_extract_meta_malformed():
    assert extract_meta("{{{") is None


# ---------------------------------------------------------------------------
# 5. Timestamps
# ---------------------------------------------------------------------------

def test_parse_timestamp_with_offset():
    dt = parse_timestamp("2026-02-13T12:00:00.000+02:00")
    assert dt == datetime(2026, 2, 13, 10, 0, tzinfo=timezone.utc)


def test_parse_timestamp_fallback_is_now():
    before = datetime.now(timezone.utc)
    dt = parse_timestamp("not a date")
    assert dt >= before
    assert dt.tzinfo is not None
