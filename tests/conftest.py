import pytest
from pytest_httpserver import HTTPServer

from cfproxy.exceptions import NotificationError
from cfproxy.http.client import SimpleRequestsClient
from cfproxy.http.proxy import Proxy
from cfproxy.stack.manager import Manager
from cfproxy.stack.registry import StackRegistry
from tests.fixtures import FakeChatClient


class BroadcastCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def failing_chat_client() -> FakeChatClient:
    client = FakeChatClient()
    client.fail_with = NotificationError("couldn't post message to slack: channel_not_found")
    return client


@pytest.fixture
def registry() -> StackRegistry:
    return StackRegistry()


@pytest.fixture
def broadcast_counter() -> BroadcastCounter:
    return BroadcastCounter()


@pytest.fixture
def manager(httpserver: HTTPServer, registry, broadcast_counter):
    """A manager that forwards requests to the ``httpserver`` backend."""
    manager = Manager(
        registry=registry,
        proxy=Proxy(httpserver.url_for("/"), client=SimpleRequestsClient(timeout=5)),
        broadcast=broadcast_counter,
    )
    yield manager
    manager.close()
