"""Collapse runs of consecutive system messages to first / "..." / last."""

from typing import Iterable

from chat_viewer.models import MessageType, NormalizedMessage

ELLIPSIS = "..."
MAX_RUN = 2  # runs longer than this are collapsed


def _collapse(run: list[NormalizedMessage]) -> list[NormalizedMessage]:
    if len(run) <= MAX_RUN:
        return run
    marker = NormalizedMessage(MessageType.SYSTEM, ELLIPSIS, run[1].timestamp)
    return [run[0], marker, run[-1]]


def group_messages(messages: Iterable[NormalizedMessage]) -> list[NormalizedMessage]:
    """Reduce runs of 3+ system messages; every other message passes through in place.

    Todo, user and assistant messages always break a run.
    """
    result = []
    run = []

    for message in messages:
        if message.type is MessageType.SYSTEM:
            run.append(message)
            continue
        if run:
            result.extend(_collapse(run))
            run = []
        result.append(message)

    if run:
        result.extend(_collapse(run))
    return result
