"""claude-chat — list Claude Code conversations and render them as HTML transcripts."""

import logging
import os
import sys
from argparse import ArgumentParser
from itertools import islice

from chat_viewer.config import Config, ConfigError
from chat_viewer.renderer import THEMES, generate_conversation_html
from chat_viewer.scanner import (
    ConversationScanner,
    filter_conversations,
    format_list_item,
    format_summary,
)
from chat_viewer.tasks import load_session_todos

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"


class UsageError(Exception):
    """A user-facing error reported on stderr with exit code 1."""


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="claude-chat",
        description="Find Claude Code conversations and render them as chat transcripts.",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML config file (default: $CHAT_VIEWER_CONFIG)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List conversations, newest first")
    list_cmd.add_argument(
        "--search",
        help="Filter by project, prompt text, or session id (case-insensitive)",
    )
    list_cmd.add_argument(
        "--limit",
        type=int,
        help="Show at most N conversations",
    )

    show_cmd = sub.add_parser("show", help="Print a conversation summary")
    show_cmd.add_argument("session", help="Session id or unique prefix")

    render_cmd = sub.add_parser("render", help="Write an HTML transcript")
    render_cmd.add_argument(
        "target",
        help="Path to a .jsonl session log, or a session id / unique prefix",
    )
    render_cmd.add_argument(
        "--output-dir",
        help="Directory for the HTML file (default: config output.dir)",
    )
    render_cmd.add_argument(
        "--todo-background",
        dest="todo_theme",
        help=f"TODO bubble background: {', '.join(THEMES)} (default: config output.todo_theme)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _scanner(config: Config) -> ConversationScanner:
    return ConversationScanner(config.path("paths", "projects_dir"))


def _resolve_session(config: Config, key: str):
    conv = _scanner(config).find(key)
    if conv is None:
        raise UsageError(f"No conversation matches '{key}'")
    return conv


def cmd_list(args, config: Config) -> None:
    if args.limit is not None and args.limit < 1:
        raise UsageError(f"--limit must be a positive integer, got {args.limit}")
    conversations = filter_conversations(_scanner(config).scan(), args.search)
    if args.limit is not None:
        conversations = list(islice(conversations, args.limit))
    for conv in conversations:
        print(format_list_item(conv))
    print(f"{len(conversations)} conversation(s)", file=sys.stderr)


def cmd_show(args, config: Config) -> None:
    conv = _resolve_session(config, args.session)
    print(format_summary(conv))
    todos = load_session_todos(config.path("paths", "todos_dir"), conv.actual_session_id)
    if todos:
        print()
        print(todos)


def cmd_render(args, config: Config) -> None:
    theme = args.todo_theme or config["output"]["todo_theme"]
    if theme not in THEMES:
        raise UsageError(
            f"Invalid TODO theme: {theme} (valid themes: {', '.join(THEMES)})"
        )

    if os.path.isfile(args.target):
        source = args.target
    else:
        source = _resolve_session(config, args.target).file_path

    output_dir = args.output_dir or str(config.path("output", "dir"))
    logger.debug("Rendering %s with theme %s into %s", source, theme, output_dir)
    result = generate_conversation_html(source, output_dir=output_dir, theme=theme)
    print(f"HTML written: {result.output_path}")
    print(f"{result.message_count} messages processed")


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "render": cmd_render,
}


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    configure_logging("DEBUG" if args.verbose else config["logging"]["level"])

    try:
        COMMANDS[args.command](args, config)
    except (UsageError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def main():
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)


if __name__ == "__main__":
    main()
