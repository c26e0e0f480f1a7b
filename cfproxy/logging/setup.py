import logging
import sys
import warnings

from cfproxy import config, constants

from .format import AddFormattedAttributes, DefaultFormatter

# levels of third-party and internal loggers, applied on top of the root log level
default_log_levels = {
    "asyncio": logging.INFO,
    "requests": logging.WARNING,
    "urllib3": logging.WARNING,
    "werkzeug": logging.WARNING,
    "slack_sdk": logging.WARNING,
    "slack_bolt": logging.WARNING,
    "cfproxy.request": logging.INFO,
}

# with CFPROXY_LOG=trace, request payloads and Slack API calls are logged too
trace_log_levels = {
    "slack_sdk": logging.DEBUG,
    "werkzeug": logging.INFO,
    "cfproxy.request": logging.DEBUG,
}


def _apply_levels(root_level: int, levels: dict):
    logging.root.setLevel(root_level)
    logging.getLogger("cfproxy").setLevel(root_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def setup_logging_for_cli(log_level=logging.INFO):
    """Plain logging for CLI commands other than ``start``, used with ``--debug``."""
    logging.basicConfig(level=log_level)
    _apply_levels(log_level, default_log_levels)


def get_log_level_from_config() -> int:
    if not config.CFPROXY_LOG:
        return logging.DEBUG if config.DEBUG else logging.INFO

    # CFPROXY_LOG wins over DEBUG, trace is debug plus the trace loggers
    name = str(config.CFPROXY_LOG).lower()
    if name in constants.TRACE_LOG_LEVELS:
        return logging.DEBUG
    return {"warn": logging.WARNING}.get(name) or logging.getLevelName(name.upper())


def create_default_handler(log_level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(DefaultFormatter())
    handler.addFilter(AddFormattedAttributes())
    return handler


def setup_logging_from_config():
    """
    Configures logging of the proxy process from ``CFPROXY_LOG`` and ``DEBUG``: one stderr handler with the
    cfproxy format replaces whatever was configured before, and Python warnings go to the log.
    """
    log_level = get_log_level_from_config()
    logging.basicConfig(level=log_level, handlers=[create_default_handler(log_level)], force=True)

    warnings.filterwarnings("ignore")
    logging.captureWarnings(True)

    _apply_levels(log_level, default_log_levels)
    if config.is_trace_logging_enabled():
        _apply_levels(log_level, trace_log_levels)
