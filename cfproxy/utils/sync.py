import time
from typing import Callable


def poll_condition(condition: Callable[[], bool], timeout: float = None, interval: float = 0.5) -> bool:
    """
    Evaluates ``condition`` every ``interval`` seconds until it returns a truthy value.

    :param condition: the condition to poll
    :param timeout: seconds after which to give up, None to wait indefinitely
    :param interval: seconds between two evaluations
    :return: True if the condition was met, False if the timeout was reached first
    """
    deadline = None if timeout is None else time.monotonic() + timeout

    while not condition():
        if deadline is not None and time.monotonic() >= deadline:
            return False
        time.sleep(interval)

    return True
