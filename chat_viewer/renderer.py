"""Artifact renderer — serializes a normalized transcript into a standalone HTML page."""

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Iterable

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from chat_viewer.models import NormalizedMessage
from chat_viewer.transcript import load_transcript

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
TEMPLATE_NAME = "transcript.html"

DEFAULT_THEME = "grid"

# CSS background rules for the TODO bubbles
THEMES = {
    "grid": (
        "background-image:"
        " linear-gradient(to right, #e0e0e0 1px, transparent 1px),"
        " linear-gradient(to bottom, #e0e0e0 1px, transparent 1px);"
        " background-size: 12px 12px;"
    ),
    "lines": (
        "background-image:"
        " linear-gradient(to bottom, transparent 19px, #d0d0d0 20px);"
        " background-size: 100% 20px;"
    ),
    "graph": (
        "background-image:"
        " linear-gradient(to right, #e8e8e8 1px, transparent 1px),"
        " linear-gradient(to bottom, #e8e8e8 1px, transparent 1px),"
        " linear-gradient(to right, #d0d0d0 1px, transparent 1px),"
        " linear-gradient(to bottom, #d0d0d0 1px, transparent 1px);"
        " background-size: 5px 5px, 5px 5px, 25px 25px, 25px 25px;"
    ),
    "dots": (
        "background-image:"
        " radial-gradient(circle, #c0c0c0 1px, transparent 1px);"
        " background-size: 15px 15px;"
        " background-position: 7.5px 7.5px;"
    ),
    "clean": "",
}

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=True,
    keep_trailing_newline=True,
)


@dataclass(frozen=True)
class RenderResult:
    output_path: str
    message_count: int


def theme_styles(theme: str) -> str:
    """CSS for the TODO bubble background; unknown themes fall back to grid."""
    if theme not in THEMES:
        logger.warning("Unknown TODO theme %r, using %s", theme, DEFAULT_THEME)
        return THEMES[DEFAULT_THEME]
    return THEMES[theme]


def messages_to_json(messages: Iterable[NormalizedMessage]) -> str:
    """JSON array of the messages, safe to inline inside a <script> element."""
    data = json.dumps([m.to_dict() for m in messages])
    return (
        data.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("'", "\\u0027")
    )


def render_html(messages: list[NormalizedMessage], theme: str = DEFAULT_THEME, title: str = "") -> str:
    template = _env.get_template(TEMPLATE_NAME)
    return template.render(
        title=title or "Claude Conversation",
        message_count=len(messages),
        todo_styles=Markup(theme_styles(theme)),
        conversation_json=Markup(messages_to_json(messages)),
    )


def artifact_filename(now: float | None = None) -> str:
    """claude-conversation-<epoch milliseconds>.html"""
    if now is None:
        now = time.time()
    return f"claude-conversation-{int(now * 1000)}.html"


def write_artifact(
    messages: list[NormalizedMessage],
    output_dir: str | os.PathLike = ".",
    theme: str = DEFAULT_THEME,
    now: float | None = None,
    title: str = "",
) -> RenderResult:
    """Render the transcript and write it under ``output_dir``."""
    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, artifact_filename(now))
    html = render_html(messages, theme=theme, title=title)
    with open(output_path, "w", encoding="utf-8", errors="replace") as f:
        f.write(html)
    logger.info("Wrote %d messages to %s", len(messages), output_path)
    return RenderResult(output_path=output_path, message_count=len(messages))


def generate_conversation_html(
    jsonl_path: str | os.PathLike,
    output_dir: str | os.PathLike = ".",
    theme: str = DEFAULT_THEME,
) -> RenderResult:
    """Normalize a session log and write its HTML transcript."""
    transcript = load_transcript(jsonl_path)
    return write_artifact(
        transcript.messages,
        output_dir=output_dir,
        theme=theme,
        title=f"Claude Conversation {transcript.session_id}".strip(),
    )
