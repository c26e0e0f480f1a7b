from unittest import mock

import pytest
from slack_sdk.errors import SlackApiError

from cfproxy.exceptions import NotificationError
from cfproxy.notifications.chat import LoggingChatClient, SlackChatClient


class TestSlackChatClient:
    def test_post(self):
        web_client = mock.MagicMock()
        web_client.chat_postMessage.return_value = {"ok": True, "ts": "1700000000.000100"}
        attachments = [{"id": 0, "color": "#ffa500", "text": "foo deploying (00:01)"}]

        ts = SlackChatClient(client=web_client).post("C0123456", "Deploying", attachments)

        assert ts == "1700000000.000100"
        web_client.chat_postMessage.assert_called_once_with(
            channel="C0123456", text="Deploying", attachments=attachments, thread_ts=None
        )

    def test_update(self):
        web_client = mock.MagicMock()

        SlackChatClient(client=web_client).update("C0123456", "1.2", "Deploying", [])

        web_client.chat_update.assert_called_once_with(
            channel="C0123456", ts="1.2", text="Deploying", attachments=[]
        )

    def test_api_errors_are_wrapped(self):
        web_client = mock.MagicMock()
        web_client.chat_postMessage.side_effect = SlackApiError(
            "The request to the Slack API failed.", {"ok": False, "error": "channel_not_found"}
        )

        with pytest.raises(NotificationError) as e:
            SlackChatClient(client=web_client).post("C0123456", "Deploying")

        assert "channel_not_found" in str(e.value)

    def test_connection_errors_are_wrapped(self):
        web_client = mock.MagicMock()
        web_client.chat_update.side_effect = ConnectionResetError("connection reset by peer")

        with pytest.raises(NotificationError):
            SlackChatClient(client=web_client).update("C0123456", "1.2", "Deploying")


def test_logging_chat_client():
    client = LoggingChatClient()

    assert client.post("C0123456", "Deploying", [{"text": "foo skipped"}]) == "1"
    assert client.post("C0123456", "skipping foo", thread_ts="1") == "2"
    client.update("C0123456", "1", "Deploying", [{"text": "foo skipped"}])
