"""Tools for formatting cfproxy logs."""
import logging
from functools import lru_cache

MAX_THREAD_NAME_LEN = 12
MAX_NAME_LEN = 26

LOG_FORMAT = f"%(asctime)s.%(msecs)03d %(cf_level)5s --- [%(cf_thread){MAX_THREAD_NAME_LEN}s] %(cf_name)-{MAX_NAME_LEN}s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

LEVEL_ABBREVIATIONS = {
    logging.CRITICAL: "FATAL",
    logging.WARNING: "WARN",
}


class DefaultFormatter(logging.Formatter):
    """
    A formatter that uses ``LOG_FORMAT`` and ``LOG_DATE_FORMAT``. Records need the attributes set by
    ``AddFormattedAttributes``.
    """

    def __init__(self, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT):
        super().__init__(fmt=fmt, datefmt=datefmt)


class AddFormattedAttributes(logging.Filter):
    """
    Adds the fixed-width fields ``DefaultFormatter`` prints: ``cf_level`` (at most five characters), ``cf_name``
    (the logger name, compressed to ``max_name_len``) and ``cf_thread`` (the tail of the thread name).
    """

    def __init__(self, max_name_len: int = None, max_thread_len: int = None):
        super().__init__()
        self.max_name_len = max_name_len or MAX_NAME_LEN
        self.max_thread_len = max_thread_len or MAX_THREAD_NAME_LEN

    def filter(self, record):
        record.cf_level = LEVEL_ABBREVIATIONS.get(record.levelno, record.levelname)
        record.cf_name = _compress_cached(record.name, self.max_name_len)
        record.cf_thread = record.threadName[-self.max_thread_len :]
        return True


@lru_cache(maxsize=256)
def _compress_cached(name: str, length: int) -> str:
    return compress_logger_name(name, length)


def compress_logger_name(name: str, length: int) -> str:
    """
    Shortens a dotted logger name to ``length`` characters. Leading parts are cut to their first letter, left to
    right, until the name fits, e.g. ``cfproxy.stack.manager`` with length 16 turns into ``c.stack.manager``. If
    that is not enough, the last part is truncated too (to one character at the least).
    """
    if len(name) <= length:
        return name

    parts = name.split(".")
    for i in range(len(parts) - 1):
        parts[i] = parts[i][0]
        compressed = ".".join(parts)
        if len(compressed) <= length:
            return compressed

    prefix = "".join(part + "." for part in parts[:-1])
    return prefix + parts[-1][: max(1, length - len(prefix))]
