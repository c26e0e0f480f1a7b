"""Skip commands posted in the thread of the status card."""
import logging
import threading
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from cfproxy.constants import SLACK_HELLO_MESSAGE
from cfproxy.exceptions import NotificationError, UnknownStackError
from cfproxy.stack.models import StackStatus

from .broadcaster import NotificationBroadcaster
from .chat import ChatClient

if TYPE_CHECKING:
    from cfproxy.stack.manager import Manager

LOG = logging.getLogger(__name__)

COMMAND_SKIP = "skip"


def parse_command(text: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Splits a chat message into a command and its argument, e.g., ``"skip my-stack "`` becomes
    ``("skip", "my-stack")``.

    :param text: the message text
    :return: a tuple of command and (trimmed) argument, or None if the message is not a command
    """
    if not text:
        return None
    parts = text.strip().split(" ", 1)
    if len(parts) != 2:
        return None
    command, argument = parts[0], parts[1].strip()
    if not command or not argument:
        return None
    return command, argument


class CommandListener:
    """
    Listens for messages in the thread of the status card over a Slack Socket Mode connection and executes
    ``skip <stack>`` commands.
    """

    def __init__(
        self,
        manager: "Manager",
        chat_client: ChatClient,
        channel: str,
        broadcaster: NotificationBroadcaster,
        bot_token: str = None,
        app_token: str = None,
    ):
        self.manager = manager
        self.chat_client = chat_client
        self.channel = channel
        self.broadcaster = broadcaster
        self.bot_token = bot_token
        self.app_token = app_token

        self._handler: Optional[SocketModeHandler] = None
        self._mutex = threading.Lock()

    def create_app(self) -> App:
        app = App(token=self.bot_token)

        @app.event("message")
        def on_message(event, logger):
            self.handle_message(event)

        return app

    def start(self) -> None:
        """Opens the Socket Mode connection (non-blocking) and greets the channel."""
        with self._mutex:
            if self._handler is not None:
                return
            self._handler = SocketModeHandler(self.create_app(), self.app_token)
            self._handler.connect()

        LOG.info("listening for skip commands in channel %s", self.channel)
        self.say(SLACK_HELLO_MESSAGE)

    def close(self) -> None:
        with self._mutex:
            if self._handler is None:
                return
            self._handler.close()
            self._handler = None

    def handle_message(self, event: Dict) -> Optional[str]:
        """
        Handles a message event. Only messages in the thread of the status card are considered.

        :param event: the Slack message event
        :return: the reply posted to the thread, or None if the message was ignored
        """
        card_ts = self.broadcaster.message_ts
        if not card_ts or event.get("thread_ts") != card_ts:
            return None

        command = parse_command(event.get("text"))
        if not command:
            return None

        name, argument = command
        if name != COMMAND_SKIP:
            LOG.debug("ignoring unknown command %s", name)
            return None

        return self.skip(argument, card_ts)

    def skip(self, stack_name: str, thread_ts: str) -> str:
        try:
            stack = self.manager.skip(stack_name)
        except UnknownStackError as e:
            reply = e.message
        else:
            if stack.status == StackStatus.SKIPPED:
                reply = f"skipping {stack_name}"
            else:
                reply = f"{stack_name} already {stack.status}"

        self.say(reply, thread_ts=thread_ts)
        self.manager.broadcast()
        return reply

    def say(self, text: str, thread_ts: str = None) -> None:
        try:
            self.chat_client.post(self.channel, text, thread_ts=thread_ts)
        except NotificationError as e:
            LOG.error("%s", e)
