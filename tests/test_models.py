"""Tests for chat_viewer/models.py"""

import json

import pytest

from chat_viewer.models import (
    MessageType,
    NormalizedMessage,
    OtherItem,
    RecordType,
    TextItem,
    ToolResultItem,
    parse_record,
)

from conftest import assistant_record, text, tool_result, user_record


class TestParseRecord:
    def test_user_string_payload(self):
        record = parse_record(json.dumps(user_record("hello")))
        assert record.type is RecordType.USER
        assert record.content == "hello"
        assert record.timestamp == "2025-05-15T14:30:00Z"
        assert record.session_id == "sess-1"
        assert record.is_meta is False

    def test_item_payload(self):
        record = parse_record(json.dumps(user_record([text("hi"), tool_result("out", is_error=True)])))
        assert record.content == (TextItem("hi"), ToolResultItem("out", is_error=True))

    def test_assistant_items(self):
        record = parse_record(json.dumps(assistant_record([
            text("answer"),
            {"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {}},
        ])))
        assert record.type is RecordType.ASSISTANT
        assert record.content == (TextItem("answer"), OtherItem("tool_use"))

    def test_unknown_type_is_other(self):
        record = parse_record(json.dumps({"type": "summary", "summary": "x"}))
        assert record.type is RecordType.OTHER
        assert record.content is None

    def test_missing_timestamp_is_empty(self):
        record = parse_record(json.dumps({"type": "user", "message": {"content": "x"}}))
        assert record.timestamp == ""

    def test_meta_flag(self):
        record = parse_record(json.dumps({"type": "user", "isMeta": True, "message": {"content": "x"}}))
        assert record.is_meta is True

    def test_tool_result_block_list_is_joined(self):
        record = parse_record(json.dumps(user_record([
            tool_result([text("line one"), {"type": "image", "source": {}}, text("line two")]),
        ])))
        assert record.content == (ToolResultItem("line one\nline two"),)

    def test_tool_result_without_content(self):
        record = parse_record(json.dumps(user_record([{"type": "tool_result", "tool_use_id": "t"}])))
        assert record.content == (ToolResultItem(None),)

    def test_side_channel_mapping_kept(self):
        record = parse_record(json.dumps(user_record([], toolUseResult={"newTodos": []})))
        assert record.tool_use_result == {"newTodos": []}

    def test_side_channel_string_ignored(self):
        record = parse_record(json.dumps(user_record([], toolUseResult="Error: failed")))
        assert record.tool_use_result is None

    def test_non_string_session_id_ignored(self):
        record = parse_record(json.dumps({"type": "user", "sessionId": 12, "message": {"content": "x"}}))
        assert record.session_id is None

    @pytest.mark.parametrize("line", ["", "   \n", "{not json", "[1, 2]", '"str"', "null", "42"])
    def test_undecodable_lines(self, line):
        assert parse_record(line) is None

    def test_trailing_newline(self):
        assert parse_record(json.dumps(user_record("x")) + "\n") is not None

    def test_oversized_integer_is_undecodable(self):
        line = '{"type": "user", "n": ' + "1" * 5000 + "}"
        assert parse_record(line) is None


class TestNormalizedMessage:
    def test_to_dict(self):
        msg = NormalizedMessage(MessageType.TODO, "body", "2025-05-15T14:30:00Z")
        assert msg.to_dict() == {"type": "todo", "content": "body", "timestamp": "2025-05-15T14:30:00Z"}

    def test_frozen(self):
        msg = NormalizedMessage(MessageType.USER, "x")
        with pytest.raises(AttributeError):
            msg.content = "changed"

    def test_default_timestamp(self):
        assert NormalizedMessage(MessageType.SYSTEM, "x").timestamp == ""
