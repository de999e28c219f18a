import json

import pytest

from chat_viewer.models import MessageType, NormalizedMessage


def user_record(content, timestamp="2025-05-15T14:30:00Z", **extra):
    record = {
        "type": "user",
        "timestamp": timestamp,
        "sessionId": "sess-1",
        "message": {"role": "user", "content": content},
    }
    record.update(extra)
    return record


def assistant_record(content, timestamp="2025-05-15T14:30:05Z", **extra):
    record = {
        "type": "assistant",
        "timestamp": timestamp,
        "sessionId": "sess-1",
        "message": {"role": "assistant", "content": content},
    }
    record.update(extra)
    return record


def tool_result(content, is_error=False):
    item = {"type": "tool_result", "tool_use_id": "toolu_1", "content": content}
    if is_error:
        item["is_error"] = True
    return item


def text(value):
    return {"type": "text", "text": value}


def system(content, timestamp=""):
    return NormalizedMessage(MessageType.SYSTEM, content, timestamp)


def todo(content, timestamp=""):
    return NormalizedMessage(MessageType.TODO, content, timestamp)


def user(content, timestamp=""):
    return NormalizedMessage(MessageType.USER, content, timestamp)


def assistant(content, timestamp=""):
    return NormalizedMessage(MessageType.ASSISTANT, content, timestamp)


def to_lines(records):
    """Serialize records (dicts or raw strings) as JSONL lines."""
    return [r if isinstance(r, str) else json.dumps(r) for r in records]


@pytest.fixture
def write_jsonl(tmp_path):
    """Write records to a .jsonl file and return its path."""

    def _write(records, name="session.jsonl", directory=None):
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_text("\n".join(to_lines(records)) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_records():
    """A short session: prompt, reply, tool chatter, a TODO update, boilerplate."""
    return [
        user_record("Please add a login page", timestamp="2025-05-15T14:30:00Z"),
        assistant_record([text("Sure, let me look around.")], timestamp="2025-05-15T14:30:05Z"),
        user_record([tool_result("file_a.py")], timestamp="2025-05-15T14:30:10Z"),
        user_record([tool_result("file_b.py")], timestamp="2025-05-15T14:30:11Z"),
        user_record([tool_result("")], timestamp="2025-05-15T14:30:12Z"),
        user_record([tool_result("file_c.py")], timestamp="2025-05-15T14:30:13Z"),
        user_record(
            [tool_result("Todos have been modified successfully.")],
            timestamp="2025-05-15T14:30:20Z",
            toolUseResult={
                "oldTodos": [],
                "newTodos": [
                    {"status": "in_progress", "priority": "high", "content": "Build login form"},
                    {"status": "pending", "priority": "low", "content": "Write tests"},
                ],
            },
        ),
        assistant_record([text("Done with the form.")], timestamp="2025-05-15T14:31:00Z"),
        {"type": "user", "isMeta": True, "timestamp": "2025-05-15T14:31:01Z",
         "message": {"content": "<command-name>/clear</command-name>"}},
        user_record(
            "This session is being continued from a previous conversation that ran out of context.",
            timestamp="2025-05-15T14:32:00Z",
        ),
        "{not json",
        {"type": "summary", "summary": "Login page work"},
    ]
