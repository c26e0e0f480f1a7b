import logging
import socket
from contextlib import closing
from typing import List, Union
from urllib.parse import urlparse

LOG = logging.getLogger(__name__)


def is_port_open(port_or_url: Union[int, str], quiet: bool = True) -> bool:
    """
    Checks whether a TCP connection can be made to the given port (on localhost) or URL.

    :param port_or_url: a port number or a URL like ``http://localhost:8442``
    :param quiet: whether to suppress the warning logged when the connection fails
    :return: True if the port accepts connections
    """
    host = "localhost"
    port = port_or_url
    if isinstance(port_or_url, str):
        url = urlparse(port_or_url)
        port = url.port
        host = url.hostname

    with closing(
        socket.socket(socket.AF_INET if ":" not in host else socket.AF_INET6, socket.SOCK_STREAM)
    ) as sock:
        sock.settimeout(1)
        result = sock.connect_ex((host, port))
        if result != 0:
            if not quiet:
                LOG.warning("Error connecting to TCP port %s:%s (result=%s)", host, port, result)
            return False
    return True


def get_free_tcp_port(blocklist: List[int] = None) -> int:
    """
    Tries to bind a socket to port 0 and returns the port that was assigned by the system. If the port is
    in the given ``blocklist``, the procedure is repeated for up to 50 times.

    :param blocklist: an optional list of ports that are not allowed as random ports
    :return: a free TCP port
    """
    blocklist = blocklist or []
    for i in range(50):
        tcp = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        tcp.bind(("", 0))
        addr, port = tcp.getsockname()
        tcp.close()
        if port not in blocklist:
            return port
    raise Exception(f"Unable to determine free TCP port with blocklist {blocklist}")
