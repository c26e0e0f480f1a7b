import logging
import os
from typing import Any, List, Tuple, Union

from cfproxy.constants import (
    BIND_HOST,
    DEFAULT_BROADCAST_INTERVAL,
    DEFAULT_CLOUDFORMATION_ENDPOINT,
    DEFAULT_CLOUDFORMATION_SCHEME,
    DEFAULT_PORT_GATEWAY,
    DEFAULT_UPSTREAM_TIMEOUT,
    LOG_LEVELS,
    MASKED_VALUE,
    TRACE_LOG_LEVELS,
    TRUE_STRINGS,
)

LOG = logging.getLogger(__name__)


class HostAndPort:
    """
    Definition of an address for the proxy to listen to.
    """

    host: str
    port: int

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port

    @classmethod
    def parse(
        cls,
        input: str,
        default_host: str,
        default_port: int,
    ) -> "HostAndPort":
        """
        Parse a `HostAndPort` from strings like:
            - 0.0.0.0:8442 -> host=0.0.0.0, port=8442
            - 0.0.0.0      -> host=0.0.0.0, port=`default_port`
            - :8442        -> host=`default_host`, port=8442
        """
        host, port = default_host, default_port
        if ":" in input:
            hostname, port_s = input.split(":", 1)
            if hostname.strip():
                host = hostname.strip()
            try:
                port = int(port_s)
            except ValueError as e:
                raise ValueError(f"specified port {port_s} not a number") from e
        else:
            if input.strip():
                host = input.strip()

        if port < 0 or port >= 2**16:
            raise ValueError("port out of range")

        return cls(host=host, port=port)

    def host_and_port(self):
        return f"{self.host}:{self.port}" if self.port is not None else self.host

    def __str__(self) -> str:
        return self.host_and_port()

    def __repr__(self) -> str:
        return f"HostAndPort(host={self.host}, port={self.port})"


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    log_type = os.environ.get(env_var_name, "").lower().strip()
    return log_type if log_type in LOG_LEVELS else False


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def get_float_env(env_var_name: str, default: float) -> float:
    value = os.environ.get(env_var_name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        LOG.warning("ignoring non-numeric value %r for %s", value, env_var_name)
        return default


def load_environment(path: str = None, env=os.environ) -> bool:
    """Loads environment variables from a dotenv file (``.env`` in the working directory by default) without
    overriding variables that are already set.

    :param path: the dotenv file to load
    :param env: environment to load the file into. Defaults to `os.environ`
    :returns: whether the file existed and was loaded
    """
    path = path or os.path.join(os.getcwd(), ".env")
    if not os.path.exists(path):
        return False

    import dotenv

    for k, v in dotenv.dotenv_values(path).items():
        # we do not want to override the environment
        if k not in env and v is not None:
            env[k] = v

    return True


# load variables from CFPROXY_ENV_FILE (or ./.env) before the module constants are evaluated
load_environment(os.environ.get("CFPROXY_ENV_FILE", "").strip() or None)

# whether to enable verbose debug logging
CFPROXY_LOG = eval_log_type("CFPROXY_LOG")
DEBUG = is_env_true("DEBUG") or CFPROXY_LOG in TRACE_LOG_LEVELS

# bot token used to post and update the status card
SLACK_TOKEN = os.environ.get("SLACK_TOKEN", "").strip()

# app-level token (xapp-...) used for the Socket Mode connection that receives skip commands
SLACK_APP_TOKEN = os.environ.get("SLACK_APP_TOKEN", "").strip()

# channel id to post the status card to, like CUL812373
SLACK_CHANNEL = os.environ.get("SLACK_CHANNEL", "").strip()

# header line of the status card, like "Deploying to production https://github.com/org/repo/actions/runs/1"
SLACK_HEADER = os.environ.get("SLACK_HEADER", "")

# host (and optional port) of the CloudFormation endpoint to forward to
CLOUDFORMATION_ENDPOINT = (
    os.environ.get("CLOUDFORMATION_ENDPOINT", "").strip() or DEFAULT_CLOUDFORMATION_ENDPOINT
)

# scheme used to reach the CloudFormation endpoint
CLOUDFORMATION_SCHEME = (
    os.environ.get("CLOUDFORMATION_SCHEME", "").strip() or DEFAULT_CLOUDFORMATION_SCHEME
)

# address the proxy binds to
GATEWAY_LISTEN = HostAndPort.parse(
    os.environ.get("GATEWAY_LISTEN", "").strip(),
    default_host=BIND_HOST,
    default_port=DEFAULT_PORT_GATEWAY,
)

# timeout (in seconds) for forwarded calls
UPSTREAM_TIMEOUT = get_float_env("UPSTREAM_TIMEOUT", DEFAULT_UPSTREAM_TIMEOUT)

# interval (in seconds) of the periodic status card refresh
BROADCAST_INTERVAL = get_float_env("BROADCAST_INTERVAL", DEFAULT_BROADCAST_INTERVAL)

CONFIG_ENV_VARS = [
    "BROADCAST_INTERVAL",
    "CFPROXY_LOG",
    "CLOUDFORMATION_ENDPOINT",
    "CLOUDFORMATION_SCHEME",
    "DEBUG",
    "GATEWAY_LISTEN",
    "SLACK_APP_TOKEN",
    "SLACK_CHANNEL",
    "SLACK_HEADER",
    "SLACK_TOKEN",
    "UPSTREAM_TIMEOUT",
]

SECRET_CONFIG_VARS = ("SLACK_APP_TOKEN", "SLACK_TOKEN")


def is_trace_logging_enabled():
    if CFPROXY_LOG:
        return str(CFPROXY_LOG).lower() in TRACE_LOG_LEVELS
    return False


def is_slack_enabled() -> bool:
    return bool(SLACK_TOKEN and SLACK_CHANNEL)


def get_cloudformation_url() -> str:
    """Returns the base URL requests are forwarded to, e.g., ``https://cloudformation.us-east-1.amazonaws.com``."""
    return f"{CLOUDFORMATION_SCHEME}://{CLOUDFORMATION_ENDPOINT}"


def collect_config_items() -> List[Tuple[str, Any]]:
    """Returns a sorted list of key-value tuples of cfproxy configuration values, with secrets masked."""
    values = globals()

    result = []
    for k in CONFIG_ENV_VARS:
        v = values.get(k)
        if k in SECRET_CONFIG_VARS and v:
            v = MASKED_VALUE
        result.append((k, v))
    result.sort()
    return result
