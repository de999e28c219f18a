"""Event classifier — turns one LogRecord into zero or more NormalizedMessages.

Rules by record type:
  - isMeta records          → nothing
  - user, string payload    → one user message unless it is session boilerplate
  - user, item payload      → system/todo message per tool_result, then one
                              user message for the accumulated text items
  - assistant               → one assistant message from the text items
  - anything else           → nothing
"""

import logging

from chat_viewer.extractor import extract_json_array
from chat_viewer.models import (
    LogRecord,
    MessageType,
    NormalizedMessage,
    RecordType,
    TextItem,
    ToolResultItem,
)
from chat_viewer.tasks import format_task_list

logger = logging.getLogger(__name__)

BOILERPLATE_MARKERS = (
    "init is analyzing your codebase",
    "This session is being continued from a previous conversation",
)

NO_OUTPUT_SENTINEL = "Command executed successfully with no output"

TODO_MARKERS = (
    "Todos have been modified successfully",
    '"status":',
    '"priority":',
)

ELLIPSIS = "..."
TODO_LINE_LIMIT = 300
OUTPUT_LINE_LIMIT = 200
OUTPUT_MAX_LINES = 6
OUTPUT_HEAD_LINES = 3
OUTPUT_TAIL_LINES = 2


def is_boilerplate(text: str) -> bool:
    return any(marker in text for marker in BOILERPLATE_MARKERS)


def is_todo_output(text: str) -> bool:
    return any(marker in text for marker in TODO_MARKERS)


def truncate_line(line: str, limit: int) -> str:
    if len(line) > limit:
        return line[:limit - len(ELLIPSIS)] + ELLIPSIS
    return line


def truncate_lines(text: str, limit: int) -> str:
    """Cap every line of ``text`` at ``limit`` characters."""
    return "\n".join(truncate_line(line, limit) for line in text.split("\n"))


def truncate_output(text: str) -> str:
    """Bound generic tool output: keep head and tail lines, then cap line width."""
    lines = text.split("\n")
    if len(lines) > OUTPUT_MAX_LINES:
        lines = lines[:OUTPUT_HEAD_LINES] + [ELLIPSIS] + lines[-OUTPUT_TAIL_LINES:]
    return truncate_lines("\n".join(lines), OUTPUT_LINE_LIMIT)


def recover_task_list(record: LogRecord, content: str) -> str | None:
    """Formatted task list for a TODO tool result, or None if none can be recovered.

    The record's ``toolUseResult.newTodos`` side-channel wins over the text.
    """
    if record.tool_use_result is not None:
        new_todos = record.tool_use_result.get("newTodos")
        if isinstance(new_todos, list):
            return format_task_list(new_todos)

    extraction = extract_json_array(content)
    if not extraction.ok:
        logger.debug("No task list recovered (%s)", extraction.failure.value)
        return None
    return format_task_list(extraction.value)


def classify_tool_result(record: LogRecord, item: ToolResultItem) -> NormalizedMessage | None:
    content = item.content
    if content is None:
        return None

    if content == "":
        if item.is_error:
            return None
        return NormalizedMessage(MessageType.SYSTEM, NO_OUTPUT_SENTINEL, record.timestamp)

    if is_todo_output(content):
        task_list = recover_task_list(record, content)
        if task_list is not None:
            return NormalizedMessage(MessageType.TODO, task_list, record.timestamp)
        return NormalizedMessage(
            MessageType.SYSTEM, truncate_lines(content, TODO_LINE_LIMIT), record.timestamp
        )

    return NormalizedMessage(MessageType.SYSTEM, truncate_output(content), record.timestamp)


def _classify_user(record: LogRecord) -> list[NormalizedMessage]:
    content = record.content

    if isinstance(content, str):
        if not content.strip() or is_boilerplate(content):
            return []
        return [NormalizedMessage(MessageType.USER, content, record.timestamp)]

    if not content:
        return []

    messages = []
    text_parts = []
    for item in content:
        if isinstance(item, TextItem):
            if not is_boilerplate(item.text):
                text_parts.append(item.text)
        elif isinstance(item, ToolResultItem):
            message = classify_tool_result(record, item)
            if message is not None:
                messages.append(message)

    user_text = "\n".join(text_parts).strip()
    if user_text:
        messages.append(NormalizedMessage(MessageType.USER, user_text, record.timestamp))
    return messages


def _classify_assistant(record: LogRecord) -> list[NormalizedMessage]:
    content = record.content
    if isinstance(content, str):
        text = content
    elif content:
        text = "\n".join(item.text for item in content if isinstance(item, TextItem))
    else:
        text = ""

    if not text:
        return []
    return [NormalizedMessage(MessageType.ASSISTANT, text, record.timestamp)]


def classify(record: LogRecord) -> list[NormalizedMessage]:
    """Produce the normalized messages contributed by one log record."""
    if record.is_meta:
        return []
    if record.type is RecordType.USER:
        return _classify_user(record)
    if record.type is RecordType.ASSISTANT:
        return _classify_assistant(record)
    return []
