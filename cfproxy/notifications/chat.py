import abc
import logging
from typing import Dict, List, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from cfproxy.exceptions import NotificationError

LOG = logging.getLogger(__name__)


class ChatClient(abc.ABC):
    """
    The chat transport the status card is published through.
    """

    @abc.abstractmethod
    def post(
        self,
        channel: str,
        text: str,
        attachments: Optional[List[Dict]] = None,
        thread_ts: Optional[str] = None,
    ) -> str:
        """
        Posts a new message.

        :param channel: the channel id
        :param text: the message text
        :param attachments: optional attachments
        :param thread_ts: the id of a message to reply to in a thread
        :return: the id (timestamp) of the new message
        :raises NotificationError: if the message could not be posted
        """

    @abc.abstractmethod
    def update(
        self, channel: str, ts: str, text: str, attachments: Optional[List[Dict]] = None
    ) -> None:
        """
        Replaces the text and attachments of an existing message.

        :param channel: the channel id
        :param ts: the id (timestamp) of the message
        :param text: the message text
        :param attachments: optional attachments
        :raises NotificationError: if the message could not be updated
        """


class SlackChatClient(ChatClient):
    """
    ChatClient that uses the Slack Web API (``chat.postMessage`` and ``chat.update``).
    """

    client: WebClient

    def __init__(self, token: str = None, client: WebClient = None):
        self.client = client or WebClient(token=token)

    def post(self, channel, text, attachments=None, thread_ts=None) -> str:
        try:
            response = self.client.chat_postMessage(
                channel=channel, text=text, attachments=attachments, thread_ts=thread_ts
            )
        except (SlackClientError, OSError) as e:
            raise NotificationError(f"couldn't post message to slack: {e}") from e
        return response["ts"]

    def update(self, channel, ts, text, attachments=None) -> None:
        try:
            self.client.chat_update(channel=channel, ts=ts, text=text, attachments=attachments)
        except (SlackClientError, OSError) as e:
            raise NotificationError(f"couldn't update slack message: {e}") from e


class LoggingChatClient(ChatClient):
    """
    ChatClient used when Slack is not configured, which only writes the messages to the log.
    """

    def __init__(self):
        self._counter = 0

    def post(self, channel, text, attachments=None, thread_ts=None) -> str:
        self._counter += 1
        LOG.info("%s", text)
        for attachment in attachments or []:
            LOG.info("  %s", attachment.get("text"))
        return str(self._counter)

    def update(self, channel, ts, text, attachments=None) -> None:
        for attachment in attachments or []:
            LOG.debug("  %s", attachment.get("text"))
