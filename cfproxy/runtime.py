"""Wires the proxy, the status card and the command listener into one process, and manages its lifecycle."""
import logging
import signal
import threading
from typing import Any, Callable, Optional

from cfproxy import config
from cfproxy.http.client import SimpleRequestsClient
from cfproxy.http.proxy import Proxy
from cfproxy.notifications.broadcaster import NotificationBroadcaster
from cfproxy.notifications.chat import ChatClient, LoggingChatClient, SlackChatClient
from cfproxy.notifications.commands import CommandListener
from cfproxy.serving import WerkzeugServer
from cfproxy.stack.manager import Manager
from cfproxy.utils.functions import call_safe
from cfproxy.utils.scheduler import Scheduler
from cfproxy.utils.threads import cleanup_threads, start_thread

LOG = logging.getLogger(__name__)


class ShutdownHandlers:
    """
    Register shutdown handlers, which are executed in reverse order of registration.
    """

    def __init__(self):
        self._callbacks = []

    def register(self, shutdown_handler: Callable[[], Any]) -> None:
        self._callbacks.append(shutdown_handler)

    def run(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        for callback in reversed(callbacks):
            call_safe(callback)


class ProxyRuntime:
    """
    The running proxy process: the HTTP server, the status card broadcaster, the periodic refresh of the card,
    and (if Slack is configured) the listener for skip commands.
    """

    def __init__(
        self,
        host: str = None,
        port: int = None,
        endpoint_url: str = None,
        chat_client: ChatClient = None,
        broadcast_interval: float = None,
    ):
        self.host = host or config.GATEWAY_LISTEN.host
        self.port = port if port is not None else config.GATEWAY_LISTEN.port
        self.endpoint_url = endpoint_url or config.get_cloudformation_url()
        self.broadcast_interval = broadcast_interval or config.BROADCAST_INTERVAL

        if chat_client is None:
            if config.is_slack_enabled():
                chat_client = SlackChatClient(token=config.SLACK_TOKEN)
            else:
                LOG.warning("SLACK_TOKEN or SLACK_CHANNEL not set, writing the status card to the log")
                chat_client = LoggingChatClient()
        self.chat_client = chat_client

        self.broadcaster = NotificationBroadcaster(
            chat_client, config.SLACK_CHANNEL, config.SLACK_HEADER, self._snapshot
        )
        self.manager = Manager(
            proxy=Proxy(self.endpoint_url, client=SimpleRequestsClient(timeout=config.UPSTREAM_TIMEOUT)),
            broadcast=self.broadcaster.trigger,
        )
        self.scheduler = Scheduler()
        self.command_listener: Optional[CommandListener] = None
        if config.is_slack_enabled() and config.SLACK_APP_TOKEN:
            self.command_listener = CommandListener(
                self.manager,
                chat_client,
                config.SLACK_CHANNEL,
                self.broadcaster,
                bot_token=config.SLACK_TOKEN,
                app_token=config.SLACK_APP_TOKEN,
            )

        self.server: Optional[WerkzeugServer] = None
        self.shutdown_handlers = ShutdownHandlers()
        self._stopped = threading.Event()

    def _snapshot(self):
        return self.manager.snapshot()

    def start(self) -> None:
        """Starts all components in the background."""
        LOG.info("forwarding CloudFormation requests to %s", self.endpoint_url)

        self.broadcaster.start()
        self.shutdown_handlers.register(self.broadcaster.close)

        start_thread(self.scheduler.run, name="scheduler")
        self.scheduler.schedule(
            self.manager.broadcast,
            period=self.broadcast_interval,
            on_error=lambda e: LOG.error("error while refreshing status card: %s", e),
        )
        self.shutdown_handlers.register(self.scheduler.close)

        if self.command_listener:
            self.command_listener.start()
            self.shutdown_handlers.register(self.command_listener.close)

        self.server = WerkzeugServer(self.manager, port=self.port, host=self.host)
        self.server.start()
        self.shutdown_handlers.register(self.server.shutdown)
        self.shutdown_handlers.register(self.manager.close)

    def run(self) -> None:
        """Starts the runtime and blocks until ``shutdown`` is called or the process is interrupted."""
        self.start()
        try:
            self._stopped.wait()
        except KeyboardInterrupt:
            LOG.info("interrupted, shutting down")
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self._stopped.set()
        self.shutdown_handlers.run()
        cleanup_threads()
        LOG.debug("[shutdown] proxy stopped")


def main(runtime: ProxyRuntime) -> None:
    """Runs the given runtime in the foreground and makes sure SIGTERM shuts it down properly."""

    def _terminate(sig: int, frame):
        runtime.shutdown()

    signal.signal(signal.SIGTERM, _terminate)
    runtime.run()
