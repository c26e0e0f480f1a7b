"""Rendering of tracked stacks into the attachments of the status card."""
import time
from typing import Dict, Iterable, List

from cfproxy.stack.models import Stack, StackStatus

COLOR_MAP = {
    StackStatus.SKIPPED: "#aaa",
    StackStatus.WORKING: "#ffa500",
    StackStatus.FAILED: "#ff4500",
    StackStatus.DONE: "#0b0",
}


def format_duration(seconds: float) -> str:
    """
    Formats a duration as ``MM:SS``. Minutes are not wrapped at the hour, 3725 seconds are ``62:05``.

    :param seconds: the duration in seconds
    :return: the formatted duration
    """
    seconds = int(seconds)
    return "%02d:%02d" % (seconds // 60, seconds % 60)


def status_string(stack: Stack, now: float = None) -> str:
    """Returns the text of the attachment of a stack, e.g., ``my-stack deploying (02:05)``."""
    if stack.status == StackStatus.WORKING:
        status = " deploying (%s)" % format_duration(stack.elapsed(now))
    elif stack.status == StackStatus.SKIPPED:
        status = " skipped"
    elif stack.status == StackStatus.DONE:
        status = " succeeded (took %s)" % format_duration(stack.elapsed(now))
    else:
        status = " FAILED"

    return stack.name + status


def render_attachments(stacks: Iterable[Stack], now: float = None) -> List[Dict]:
    """
    Renders one colored attachment per stack, in the order of the given stacks.

    :param stacks: the stacks to render (usually a registry snapshot)
    :param now: the reference time for the elapsed time of working stacks
    :return: a list of Slack attachment dicts
    """
    now = now if now is not None else time.time()
    return [
        {
            "id": stack.id,
            "color": COLOR_MAP[stack.status],
            "text": status_string(stack, now),
        }
        for stack in stacks
    ]
