import logging
import threading
from concurrent.futures import Future
from typing import Callable, List

LOG = logging.getLogger(__name__)

# background threads that are stopped on shutdown
TMP_THREADS: List["FuncThread"] = []


class FuncThread(threading.Thread):
    """Runs ``func(params)`` in a daemon thread and keeps the outcome in ``result_future``."""

    def __init__(self, func: Callable, params=None, name: str = None):
        super().__init__(name=name, daemon=True)
        self.func = func
        self.params = params
        self.result_future = Future()
        self._stop_event = threading.Event()

    def run(self):
        try:
            result = self.func(self.params)
        except Exception as e:
            LOG.info("thread %s failed: %s", self.name, e, exc_info=LOG.isEnabledFor(logging.DEBUG))
            self.result_future.set_exception(e)
        else:
            self.result_future.set_result(result)

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def stop(self) -> None:
        self._stop_event.set()


def start_thread(func: Callable, params=None, name: str = None) -> FuncThread:
    """Starts ``func`` in a background thread that ``cleanup_threads`` will stop."""
    thread = FuncThread(func, params, name=name)
    thread.start()
    TMP_THREADS.append(thread)
    return thread


def cleanup_threads():
    for thread in TMP_THREADS:
        thread.stop()
    TMP_THREADS.clear()
    LOG.debug("[shutdown] Done cleaning up threads")
