import logging
from typing import Any, Callable, Dict, Optional, Tuple

LOG = logging.getLogger(__name__)


def call_safe(
    func: Callable, args: Tuple = None, kwargs: Dict = None, exception_message: str = None
) -> Optional[Any]:
    """
    Calls the given function and logs (instead of raising) any exception it raises. The traceback is only
    logged if the logger is enabled for DEBUG.

    :param func: function to call
    :param args: positional arguments
    :param kwargs: keyword arguments
    :param exception_message: message to log on exception, defaults to one that names the function
    :return: the return value of func, or None if it raised an exception
    """
    try:
        return func(*(args or ()), **(kwargs or {}))
    except Exception as e:
        message = exception_message or f"error calling function {getattr(func, '__name__', func)}"
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.exception(message)
        else:
            LOG.warning("%s: %s", message, e)
        return None
