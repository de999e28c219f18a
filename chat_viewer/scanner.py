"""Conversation discovery — scan a projects directory for session logs and summarize them."""

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from chat_viewer.classifier import is_boilerplate
from chat_viewer.models import LogRecord, RecordType, TextItem, parse_record
from chat_viewer.transcript import read_lines

logger = logging.getLogger(__name__)

SESSION_SUFFIX = ".jsonl"
FIRST_PROMPT_LENGTH = 120
PREVIEW_PROMPT_LENGTH = 80
KEPT_PROMPTS = 5

_HOME_PREFIX = re.compile(r"^(?:Users|home)/[^/]+/")


@dataclass(frozen=True)
class UserPrompt:
    content: str
    timestamp: str


@dataclass
class ConversationSummary:
    file_path: str
    project_name: str
    session_id: str           # file stem
    actual_session_id: str    # sessionId from the records, file stem as fallback
    start_time: str | None = None
    end_time: str | None = None
    message_count: int = 0
    user_prompt_count: int = 0
    first_prompt: str = ""
    full_first_prompt: str = ""
    search_text: str = ""
    user_prompts: list[UserPrompt] = field(default_factory=list)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed). Returns None if invalid."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def clean_project_name(project_dir: str) -> str:
    """Turn an encoded project directory name back into a readable path.

    ``-Users-alice-src-app`` → ``~/src/app``
    """
    name = project_dir[1:] if project_dir.startswith("-") else project_dir
    name = name.replace("-", "/")
    return _HOME_PREFIX.sub("~/", name)


def extract_user_text(record: LogRecord) -> str:
    """User-authored text of a record; tool results are not part of it."""
    if isinstance(record.content, str):
        return record.content
    if not record.content:
        return ""
    return "\n".join(item.text for item in record.content if isinstance(item, TextItem))


def summarize_lines(lines: Iterable[str], file_path: str, project_name: str) -> ConversationSummary | None:
    """Summarize one session log. Returns None when it holds no decodable records."""
    stem = os.path.splitext(os.path.basename(file_path))[0]
    start_time = None
    end_time = None
    actual_session_id = None
    message_count = 0
    prompts = []

    for line in lines:
        record = parse_record(line)
        if record is None or record.is_meta:
            continue

        if start_time is None:
            start_time = record.timestamp or None
        if record.timestamp:
            end_time = record.timestamp
        if actual_session_id is None and record.session_id:
            actual_session_id = record.session_id
        message_count += 1

        if record.type is RecordType.USER:
            text = extract_user_text(record).strip()
            if text and not is_boilerplate(text):
                prompts.append(UserPrompt(content=text, timestamp=record.timestamp))

    if message_count == 0:
        return None

    first_prompt = prompts[0].content if prompts else "No user content found"
    kept = prompts[:KEPT_PROMPTS]
    return ConversationSummary(
        file_path=file_path,
        project_name=clean_project_name(project_name),
        session_id=stem,
        actual_session_id=actual_session_id or stem,
        start_time=start_time,
        end_time=end_time,
        message_count=message_count,
        user_prompt_count=len(prompts),
        first_prompt=truncate_text(first_prompt, FIRST_PROMPT_LENGTH),
        full_first_prompt=first_prompt,
        search_text=" ".join(p.content for p in kept).lower(),
        user_prompts=kept,
    )


def summarize_file(file_path: str, project_name: str) -> ConversationSummary | None:
    return summarize_lines(read_lines(file_path), file_path, project_name)


def _sort_key(summary: ConversationSummary) -> datetime:
    return parse_timestamp(summary.start_time) or datetime.min.replace(tzinfo=timezone.utc)


def _prefer(candidate: ConversationSummary, existing: ConversationSummary) -> bool:
    """True if ``candidate`` should replace ``existing`` for the same session."""
    if candidate.message_count > existing.message_count:
        return True
    return _sort_key(candidate) > _sort_key(existing)


class ConversationScanner:
    """Finds session logs under ``<projects_dir>/<project>/*.jsonl``."""

    def __init__(self, projects_dir: str | os.PathLike):
        self.projects_dir = os.fspath(projects_dir)

    def iter_session_files(self) -> Iterable[tuple[str, str]]:
        """Yield (file_path, project_dir_name) for every session log."""
        if not os.path.isdir(self.projects_dir):
            raise FileNotFoundError(
                f"Projects directory not found: {self.projects_dir}"
            )
        for project in sorted(os.listdir(self.projects_dir)):
            project_path = os.path.join(self.projects_dir, project)
            if not os.path.isdir(project_path):
                continue
            for name in sorted(os.listdir(project_path)):
                if name.endswith(SESSION_SUFFIX):
                    yield os.path.join(project_path, name), project

    def scan(self) -> list[ConversationSummary]:
        """Summaries of all sessions, one per session identity, newest first."""
        sessions: dict[str, ConversationSummary] = {}

        for file_path, project in self.iter_session_files():
            try:
                summary = summarize_file(file_path, project)
            except OSError as exc:
                logger.warning("Could not parse %s: %s", file_path, exc)
                continue
            if summary is None:
                continue

            existing = sessions.get(summary.actual_session_id)
            if existing is None or _prefer(summary, existing):
                sessions[summary.actual_session_id] = summary

        logger.info("Found %d conversations in %s", len(sessions), self.projects_dir)
        return sorted(sessions.values(), key=_sort_key, reverse=True)

    def find(self, key: str) -> ConversationSummary | None:
        """Look up a conversation by session id, or a unique prefix of one."""
        conversations = self.scan()
        for conv in conversations:
            if key in (conv.session_id, conv.actual_session_id):
                return conv
        prefixed = [
            c for c in conversations
            if c.session_id.startswith(key) or c.actual_session_id.startswith(key)
        ]
        if len(prefixed) == 1:
            return prefixed[0]
        return None


def filter_conversations(conversations: list[ConversationSummary], term: str | None) -> list[ConversationSummary]:
    """Case-insensitive match on prompts, project, first prompt, or session id."""
    if not term:
        return conversations
    needle = term.lower().strip()
    return [
        c for c in conversations
        if needle in c.search_text
        or needle in c.project_name.lower()
        or needle in c.first_prompt.lower()
        or needle in c.session_id.lower()
    ]


def format_date(value: str | None, compact: bool = False) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return "?"
    if compact:
        return parsed.strftime("%d/%m %H:%M")
    return parsed.strftime("%d/%m/%Y %H:%M")


def calculate_duration(start: str | None, end: str | None) -> str:
    """Human duration between two timestamps, e.g. ``1h 5m`` or ``12m``."""
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return "?"
    minutes = int((end_dt - start_dt).total_seconds() // 60)
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m"


def format_list_item(conv: ConversationSummary) -> str:
    """Two-line listing entry: dates, message count, project, then first prompt."""
    return (
        f"{format_date(conv.start_time, compact=True)} - {format_date(conv.end_time, compact=True)}"
        f" [{conv.message_count:4d}] {conv.project_name}  ({conv.session_id})\n"
        f"  {conv.first_prompt}"
    )


def format_summary(conv: ConversationSummary) -> str:
    """Human-readable conversation summary."""
    lines = []
    lines.append(f"Project:  {conv.project_name}")
    lines.append(f"Session:  {conv.actual_session_id}")
    lines.append(f"Start:    {format_date(conv.start_time)}")
    lines.append(f"End:      {format_date(conv.end_time)}")
    lines.append(f"Duration: {calculate_duration(conv.start_time, conv.end_time)}")
    lines.append(f"Messages: {conv.message_count} ({conv.user_prompt_count} from user)")
    lines.append("")
    lines.append("First prompt:")
    lines.append(f'  "{conv.full_first_prompt}"')

    if len(conv.user_prompts) > 1:
        lines.append("")
        lines.append("Next prompts:")
        for i, prompt in enumerate(conv.user_prompts[1:], start=2):
            lines.append(f"  {i}. {truncate_text(prompt.content, PREVIEW_PROMPT_LENGTH)}")

    return "\n".join(lines)
