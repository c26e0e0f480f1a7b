import logging
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from werkzeug.datastructures import Headers
from werkzeug.wrappers import Request as WerkzeugRequest

from cfproxy import config
from cfproxy.chain import HandlerChain, RequestContext
from cfproxy.http import Response
from cfproxy.http.client import SimpleRequestsClient
from cfproxy.http.proxy import Proxy

from .handlers import (
    BroadcastFinalizer,
    ClassifyRequestHandler,
    DescribeStatusHandler,
    ErrorResponseHandler,
    ExceptionLogger,
    ForwardRequestHandler,
    ResponseLogger,
    StackTrackingHandler,
)
from .models import Stack
from .registry import StackRegistry

if TYPE_CHECKING:
    from _typeshed.wsgi import StartResponse, WSGIEnvironment

LOG = logging.getLogger(__name__)


class Manager:
    """
    Ties the stack registry, the CloudFormation proxy and the status card together. Every incoming request runs
    through a fresh ``HandlerChain``:

    * classify the request (``CreateChangeSet``, ``DescribeStacks``, or anything else)
    * register the stack of a new change set, or look up the stack of a describe poll
    * forward the request to CloudFormation
    * rewrite the reply for skipped stacks, or advance the stack status according to the reply

    The manager is also a WSGI application, so it can be served directly.
    """

    registry: StackRegistry
    proxy: Proxy

    def __init__(
        self,
        registry: StackRegistry = None,
        proxy: Proxy = None,
        broadcast: Optional[Callable[[], None]] = None,
    ):
        """
        :param registry: the stack registry, a new one is created by default
        :param proxy: the proxy to CloudFormation, by default requests are forwarded to the configured endpoint
        :param broadcast: called (without arguments) whenever the status card should be republished
        """
        self.registry = registry or StackRegistry()
        self.proxy = proxy or Proxy(
            config.get_cloudformation_url(),
            client=SimpleRequestsClient(timeout=config.UPSTREAM_TIMEOUT),
        )
        self._broadcast = broadcast

        self.request_handlers = [
            ClassifyRequestHandler(),
            StackTrackingHandler(self.registry),
            ForwardRequestHandler(self.proxy),
            DescribeStatusHandler(self.registry),
        ]
        self.response_handlers = [ResponseLogger()]
        self.exception_handlers = [ExceptionLogger(), ErrorResponseHandler()]
        self.finalizers = [BroadcastFinalizer(self.broadcast)]

    def new_chain(self) -> HandlerChain:
        return HandlerChain(
            request_handlers=self.request_handlers,
            response_handlers=self.response_handlers,
            finalizers=self.finalizers,
            exception_handlers=self.exception_handlers,
        )

    def handle(self, request: WerkzeugRequest) -> Response:
        """
        Proxies the given request and returns the reply for the caller.

        :param request: the incoming request
        :return: the reply of CloudFormation, or an error response
        """
        response = Response()
        self.new_chain().handle(RequestContext(request), response)
        return response

    def skip(self, name: str) -> Stack:
        """
        Marks the stack with the given name as skipped. Describe polls for it are answered with a successful
        status from now on.

        :raises UnknownStackError: if no stack with that name is tracked
        """
        return self.registry.mark_skipped(name)

    def snapshot(self) -> List[Stack]:
        return self.registry.snapshot()

    def broadcast(self) -> None:
        if self._broadcast:
            self._broadcast()

    def close(self):
        self.proxy.close()

    def __call__(self, environ: "WSGIEnvironment", start_response: "StartResponse") -> Iterable[bytes]:
        LOG.debug("%s %s%s", environ["REQUEST_METHOD"], environ.get("HTTP_HOST"), environ.get("RAW_URI", ""))
        request = WerkzeugRequest(environ)
        # by default, werkzeug requests from environ are immutable
        request.headers = Headers(request.headers)

        response = self.handle(request)
        return response(environ, start_response)
