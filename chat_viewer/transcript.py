"""Normalization pipeline: raw lines → records → messages → grouped transcript."""

import logging
import os
from dataclasses import dataclass, field
from typing import Generator, Iterable

from chat_viewer.classifier import classify
from chat_viewer.grouper import group_messages
from chat_viewer.models import LogRecord, NormalizedMessage, parse_record

logger = logging.getLogger(__name__)


@dataclass
class Transcript:
    session_id: str
    source_file: str
    messages: list[NormalizedMessage] = field(default_factory=list)
    records: int = 0
    dropped_lines: int = 0


def read_lines(filepath: str | os.PathLike) -> Generator[str, None, None]:
    """Yield each line of a session log. Undecodable bytes are replaced."""
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        yield from f


def normalize_records(records: Iterable[LogRecord]) -> list[NormalizedMessage]:
    messages = []
    for record in records:
        messages.extend(classify(record))
    return group_messages(messages)


def normalize_lines(lines: Iterable[str]) -> list[NormalizedMessage]:
    """Turn raw log lines into the bounded, display-ready message list."""
    return load_lines(lines).messages


def load_lines(lines: Iterable[str], source_file: str = "") -> Transcript:
    session_id = None
    records = []
    dropped = 0

    for line in lines:
        if not line.strip():
            continue
        record = parse_record(line)
        if record is None:
            dropped += 1
            continue
        if session_id is None and record.session_id:
            session_id = record.session_id
        records.append(record)

    if dropped:
        logger.debug("Dropped %d undecodable line(s) from %s", dropped, source_file or "<input>")

    if session_id is None:
        session_id = os.path.splitext(os.path.basename(source_file))[0] if source_file else ""

    return Transcript(
        session_id=session_id,
        source_file=source_file,
        messages=normalize_records(records),
        records=len(records),
        dropped_lines=dropped,
    )


def load_transcript(filepath: str | os.PathLike) -> Transcript:
    """Read a session log from disk and normalize it."""
    path = os.fspath(filepath)
    return load_lines(read_lines(path), source_file=path)
