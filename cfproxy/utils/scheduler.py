import logging
import threading
import time
from typing import Callable, List, Optional

LOG = logging.getLogger(__name__)


class PeriodicTask:
    """
    A function that the ``Scheduler`` calls at a fixed rate. The next deadline is one period after the previous
    one, the time the function takes is not taken into account.
    """

    def __init__(self, func: Callable[[], None], period: float, on_error: Callable[[Exception], None] = None):
        self.func = func
        self.period = period
        self.on_error = on_error
        self.deadline = time.monotonic()
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def run(self):
        try:
            self.func()
        except Exception as e:
            if self.on_error:
                self.on_error(e)
            else:
                LOG.warning("error while running scheduled task %s: %s", self.func, e)
        self.deadline += self.period


class Scheduler:
    """
    Runs periodic tasks in the thread that calls ``run``, until ``close`` is called. Used to refresh the status
    card at a fixed rate.
    """

    def __init__(self) -> None:
        self._tasks: List[PeriodicTask] = []
        self._condition = threading.Condition()
        self._closed = False

    def schedule(
        self,
        func: Callable[[], None],
        period: float,
        on_error: Callable[[Exception], None] = None,
    ) -> PeriodicTask:
        """
        Schedules ``func`` to run right away and then every ``period`` seconds.

        :param func: the task
        :param period: seconds between two runs
        :param on_error: called with the exception if the task raises, otherwise the error is logged
        :return: the task, which can be cancelled
        """
        task = PeriodicTask(func, period, on_error=on_error)
        with self._condition:
            self._tasks.append(task)
            self._condition.notify()
        return task

    def close(self) -> None:
        """Terminates the run loop."""
        with self._condition:
            self._closed = True
            self._condition.notify()

    def run(self, *_):
        while True:
            with self._condition:
                self._tasks = [task for task in self._tasks if not task.cancelled]
                if self._closed:
                    return

                now = time.monotonic()
                due = [task for task in self._tasks if task.deadline <= now]
                if not due:
                    next_deadline: Optional[float] = min((t.deadline for t in self._tasks), default=None)
                    self._condition.wait(None if next_deadline is None else next_deadline - now)
                    continue

            # tasks run outside the lock, so schedule and close never wait for them
            for task in due:
                if not task.cancelled:
                    task.run()
