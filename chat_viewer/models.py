"""Session log records and normalized transcript messages — frozen dataclasses + line decoding."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class RecordType(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: Any) -> "RecordType":
        """Map the raw ``type`` tag to a variant; anything unrecognized is OTHER."""
        if tag == "user":
            return cls.USER
        if tag == "assistant":
            return cls.ASSISTANT
        return cls.OTHER


class MessageType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TODO = "todo"


@dataclass(frozen=True)
class TextItem:
    text: str


@dataclass(frozen=True)
class ToolResultItem:
    content: str | None   # None when the item carries no content at all
    is_error: bool = False


@dataclass(frozen=True)
class OtherItem:
    kind: str             # tool_use, image, thinking, ...


ContentItem = TextItem | ToolResultItem | OtherItem


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    type: RecordType
    is_meta: bool = False
    session_id: str | None = None
    content: str | tuple[ContentItem, ...] | None = None
    tool_use_result: dict | None = None


@dataclass(frozen=True)
class NormalizedMessage:
    type: MessageType
    content: str
    timestamp: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type.value,
            "content": self.content,
            "timestamp": self.timestamp,
        }


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _tool_result_content(raw: Any) -> str | None:
    """Normalize tool_result content to a string.

    Older logs store a plain string; newer ones a list of ``{"type": "text"}``
    blocks, which are joined with newlines. Non-text blocks are ignored.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        parts = []
        for block in raw:
            if isinstance(block, dict) and block.get("type") == "text":
                parts.append(_as_text(block.get("text")))
            elif isinstance(block, str):
                parts.append(block)
        return "\n".join(parts)
    return _as_text(raw)


def parse_content_item(raw: Any) -> ContentItem:
    """Convert one element of a message's content list into a ContentItem."""
    if isinstance(raw, str):
        return TextItem(text=raw)
    if not isinstance(raw, dict):
        return OtherItem(kind=type(raw).__name__)

    kind = raw.get("type")
    if kind == "text":
        return TextItem(text=_as_text(raw.get("text")))
    if kind == "tool_result":
        return ToolResultItem(
            content=_tool_result_content(raw.get("content")),
            is_error=bool(raw.get("is_error", False)),
        )
    return OtherItem(kind=_as_text(kind) or "unknown")


def _parse_content(message: Any) -> str | tuple[ContentItem, ...] | None:
    if isinstance(message, str):
        return message
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return tuple(parse_content_item(item) for item in content)
    return None


def record_from_dict(data: dict) -> LogRecord:
    """Build a LogRecord from an already-decoded JSON object."""
    side_channel = data.get("toolUseResult")
    session_id = data.get("sessionId")
    return LogRecord(
        timestamp=_as_text(data.get("timestamp")),
        type=RecordType.from_tag(data.get("type")),
        is_meta=bool(data.get("isMeta", False)),
        session_id=session_id if isinstance(session_id, str) else None,
        content=_parse_content(data.get("message")),
        tool_use_result=side_channel if isinstance(side_channel, dict) else None,
    )


def parse_record(line: str) -> LogRecord | None:
    """Decode a single log line into a LogRecord. Returns None for undecodable lines."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        data = json.loads(stripped)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    return record_from_dict(data)
