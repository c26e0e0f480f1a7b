import logging
import threading
from typing import TYPE_CHECKING, Optional

from werkzeug.serving import WSGIRequestHandler, make_server

from cfproxy import constants
from cfproxy.utils.net import is_port_open
from cfproxy.utils.sync import poll_condition
from cfproxy.utils.threads import FuncThread, start_thread

if TYPE_CHECKING:
    from _typeshed.wsgi import WSGIApplication, WSGIEnvironment

LOG = logging.getLogger(__name__)


class CustomWSGIRequestHandler(WSGIRequestHandler):
    def make_environ(self) -> "WSGIEnvironment":
        environ = super().make_environ()

        # restore RAW_URI from the requestline, which will be something like ``POST /?foo=bar%20ed HTTP/1.1``
        environ["RAW_URI"] = " ".join(self.requestline.split(" ")[1:-1])

        return environ

    def log_request(self, *args, **kwargs):
        # requests are logged by the handler chain
        pass


class WerkzeugServer:
    """
    Serves a WSGI application (the proxy) through werkzeug's threaded server, one thread per request. The server
    loop runs in a background thread between ``start`` and ``shutdown``.
    """

    def __init__(
        self,
        app: "WSGIApplication",
        port: int = constants.DEFAULT_PORT_GATEWAY,
        host: str = constants.BIND_HOST,
    ) -> None:
        self.app = app
        self.host = host
        self.port = port
        self.server = make_server(host, port, app=app, threaded=True, request_handler=CustomWSGIRequestHandler)

        self._thread: Optional[FuncThread] = None
        self._lifecycle_lock = threading.Lock()
        self._started = threading.Event()
        self._stopped = threading.Event()

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> bool:
        """
        Starts serving in a background thread.

        :return: False if the server had already been started
        """
        with self._lifecycle_lock:
            if self._started.is_set():
                return False
            self._thread = start_thread(self._serve, name=f"server-{self.port}")
            self._started.set()
            return True

    def _serve(self, *_):
        LOG.info("proxy listening on %s", self.url)
        try:
            self.server.serve_forever()
        finally:
            self._stopped.set()
            LOG.debug("proxy server on %s returning", self.url)

    def is_running(self) -> bool:
        return self._started.is_set() and not self._stopped.is_set() and self._thread.running

    def is_up(self) -> bool:
        """Whether the server was started and accepts connections."""
        return self._started.is_set() and is_port_open(self.url)

    def wait_is_up(self, timeout: float = None) -> bool:
        if not self._started.wait(timeout=timeout):
            return False
        return poll_condition(self.is_up, timeout=timeout, interval=0.1)

    def shutdown(self) -> None:
        """
        Stops the server loop and closes the socket. Repeated calls have no effect.

        :raises RuntimeError: if the server was never started
        """
        with self._lifecycle_lock:
            if not self._started.is_set():
                raise RuntimeError("cannot shutdown server before it is started")
            if self._stopped.is_set():
                return
            self._thread.stop()
            self._stopped.set()
            self.server.shutdown()
            self.server.server_close()

    def join(self, timeout: float = None) -> None:
        """
        Waits until the server thread returns.

        :raises TimeoutError: if the thread is still running after ``timeout`` seconds
        """
        if not self._started.is_set():
            raise RuntimeError("cannot join server before it is started")
        exception = self._thread.result_future.exception(timeout)
        if exception:
            LOG.debug("server thread ended with %s", exception)
