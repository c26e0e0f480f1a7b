import logging
import queue
import threading
from typing import Callable, List, Optional

from cfproxy.exceptions import NotificationError
from cfproxy.stack.models import Stack
from cfproxy.utils.threads import FuncThread, start_thread

from .chat import ChatClient
from .render import render_attachments

LOG = logging.getLogger(__name__)


class NotificationBroadcaster:
    """
    Publishes the status card: the first broadcast posts a message with one attachment per stack, later
    broadcasts update that message in place.

    Broadcasts requested through ``trigger`` are performed by a worker thread, so a slow chat transport never
    delays proxied requests. Requests that pile up while a broadcast is running are coalesced into one.
    """

    POISON = object()

    def __init__(
        self,
        chat_client: ChatClient,
        channel: str,
        header: str,
        snapshot: Callable[[], List[Stack]],
    ):
        """
        :param chat_client: the chat transport
        :param channel: the channel to post the status card to
        :param header: the text of the status card
        :param snapshot: returns the stacks to render
        """
        self.chat_client = chat_client
        self.channel = channel
        self.header = header
        self.snapshot = snapshot

        self._queue = queue.Queue()
        # serializes broadcasts, so the card is posted only once
        self._broadcast_lock = threading.Lock()
        # guards only the message id, readers never wait for a chat call
        self._ts_lock = threading.Lock()
        self._message_ts: Optional[str] = None
        self._thread: Optional[FuncThread] = None

    @property
    def message_ts(self) -> Optional[str]:
        """The id of the status card message, or None if it has not been posted yet."""
        with self._ts_lock:
            return self._message_ts

    def trigger(self) -> None:
        """Requests an asynchronous broadcast."""
        self._queue.put(True)

    def broadcast(self) -> None:
        """
        Renders the current stacks and posts or updates the status card. Chat failures are logged and swallowed.
        """
        attachments = render_attachments(self.snapshot())

        with self._broadcast_lock:
            message_ts = self.message_ts
            try:
                if message_ts is None:
                    message_ts = self.chat_client.post(self.channel, self.header, attachments)
                    LOG.debug("posted status card %s", message_ts)
                    with self._ts_lock:
                        self._message_ts = message_ts
                else:
                    self.chat_client.update(self.channel, message_ts, self.header, attachments)
            except NotificationError as e:
                LOG.error("%s", e)

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = start_thread(self._run, name="broadcaster")

    def close(self) -> None:
        self._queue.put(self.POISON)

    def _run(self, *_):
        while True:
            item = self._queue.get()
            if item is self.POISON:
                return

            # coalesce everything that queued up in the meantime
            stop = False
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if item is self.POISON:
                    stop = True

            try:
                self.broadcast()
            except Exception as e:
                LOG.exception("error while broadcasting status card: %s", e)

            if stop:
                return
