import pytest

from cfproxy.notifications.render import format_duration, render_attachments
from cfproxy.stack.models import Stack, StackStatus


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "00:00"), (5, "00:05"), (59.9, "00:59"), (60, "01:00"), (125, "02:05"), (3725, "62:05")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def _stack(stack_id, name, status, start=1000.0, end=None, create=False):
    return Stack(name=name, create=create, id=stack_id, status=status, start=start, end=end)


def test_render_attachments():
    stacks = [
        _stack(0, "network", StackStatus.DONE, start=1000.0, end=1095.0, create=True),
        _stack(1, "database", StackStatus.FAILED, start=1000.0, end=1200.0),
        _stack(2, "frontend", StackStatus.SKIPPED, start=1010.0, end=1020.0),
        _stack(3, "backend", StackStatus.WORKING, start=1100.0),
    ]

    attachments = render_attachments(stacks, now=1225.0)

    assert attachments == [
        {"id": 0, "color": "#0b0", "text": "network succeeded (took 01:35)"},
        {"id": 1, "color": "#ff4500", "text": "database FAILED"},
        {"id": 2, "color": "#aaa", "text": "frontend skipped"},
        {"id": 3, "color": "#ffa500", "text": "backend deploying (02:05)"},
    ]


def test_render_empty():
    assert render_attachments([]) == []
