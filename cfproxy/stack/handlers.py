"""Handlers of the chain that tracks stacks while proxying CloudFormation requests."""
import logging
import uuid
from typing import Callable

import xmltodict

from cfproxy import config
from cfproxy.chain import ExceptionHandler, Handler, HandlerChain, RequestContext
from cfproxy.constants import CLOUDFORMATION_XMLNS
from cfproxy.exceptions import (
    CfProxyError,
    MalformedBackendReplyError,
    UnknownStackError,
    UpstreamUnavailableError,
)
from cfproxy.http import Response
from cfproxy.http.proxy import Proxy
from cfproxy.utils.strings import to_str, truncate

from .classifier import Action, classify_request
from .extractor import extract_stack_status
from .models import Stack, StackStatus
from .registry import StackRegistry
from .rewriter import short_circuit

LOG = logging.getLogger(__name__)
REQUEST_LOG = logging.getLogger("cfproxy.request")


class ClassifyRequestHandler(Handler):
    """
    Reads the body of the request and determines the CloudFormation action and stack it refers to.
    """

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        context.payload = context.request.get_data()
        context.operation = classify_request(context.payload)

        if config.is_trace_logging_enabled():
            REQUEST_LOG.debug("payload: %s", to_str(context.payload, errors="replace"))


class StackTrackingHandler(Handler):
    """
    Registers a new stack when a change set is created, and looks up the tracked stack of a ``DescribeStacks``
    poll. Polls for stacks the proxy has never seen are passed through untouched.
    """

    def __init__(self, registry: StackRegistry):
        self.registry = registry

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        operation = context.operation
        if not operation or not operation.is_tracked:
            return

        if not operation.stack_name:
            LOG.warning("%s request without a StackName, not tracking it", operation.action.value)
            return

        if operation.action == Action.CREATE_CHANGE_SET:
            stack = Stack(name=operation.stack_name, create=operation.is_create)
            self.registry.add(stack)
            context.stack = self.registry.get(stack.id)
            context.stacks_changed = True
            return

        try:
            context.stack = self.registry.get_by_name(operation.stack_name)
        except UnknownStackError:
            LOG.debug("describe poll for untracked stack %s", operation.stack_name)


class ForwardRequestHandler(Handler):
    """
    Forwards the request to CloudFormation and copies the reply (status, headers, body) into the response.
    """

    def __init__(self, proxy: Proxy):
        self.proxy = proxy

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        upstream = self.proxy.forward(context.request)
        context.upstream_response = upstream

        response.headers.clear()
        response.update_from(upstream)


class DescribeStatusHandler(Handler):
    """
    Evaluates the reply to a ``DescribeStacks`` poll of a tracked stack. For skipped stacks the reply is rewritten
    to report a successful terminal status, and the real status is ignored. Otherwise, the status of the stack is
    advanced according to the ``StackStatus`` in the reply.
    """

    def __init__(self, registry: StackRegistry):
        self.registry = registry

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        if not context.stack or context.operation.action != Action.DESCRIBE_STACKS:
            return

        upstream = context.upstream_response
        # the status may have changed while the request was forwarded
        stack = self.registry.get(context.stack.id)
        context.stack = stack

        if stack.status == StackStatus.SKIPPED:
            LOG.debug("short-circuiting describe poll of skipped stack %s", stack.name)
            response.set_response(short_circuit(stack, upstream.get_data()))
            chain.stop()
            return

        data = upstream.get_data()
        if not 200 <= upstream.status_code < 300 or not data:
            # redirects, empty and error replies (throttling, expired credentials) are relayed as they are
            return

        backend_status = extract_stack_status(data)
        if self.registry.apply_backend_status(stack.id, backend_status):
            context.stacks_changed = True


class BroadcastFinalizer(Handler):
    """
    Triggers a broadcast of the status card if the request registered a stack or changed its status.
    """

    def __init__(self, trigger: Callable[[], None]):
        self.trigger = trigger

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        if context.stacks_changed:
            self.trigger()


class ExceptionLogger(ExceptionHandler):
    """
    Logs exceptions into a logger.
    """

    def __init__(self, logger=None):
        self.logger = logger or LOG

    def __call__(
        self,
        chain: HandlerChain,
        exception: Exception,
        context: RequestContext,
        response: Response,
    ):
        if isinstance(exception, CfProxyError):
            # expected failure modes are logged without a stack trace
            self.logger.warning("error while proxying %s: %s", context, exception)
            return
        if self.logger.isEnabledFor(level=logging.DEBUG):
            self.logger.exception("exception during call chain", exc_info=exception)
        else:
            self.logger.error("exception during call chain: %s", exception)


class ErrorResponseHandler(ExceptionHandler):
    """
    Replaces the response with a CloudFormation-style ``ErrorResponse`` document: 503 if CloudFormation could not
    be reached, 502 if its reply could not be understood, 500 for anything else.
    """

    def __call__(
        self,
        chain: HandlerChain,
        exception: Exception,
        context: RequestContext,
        response: Response,
    ):
        if isinstance(exception, UpstreamUnavailableError):
            status_code, code = 503, "ServiceUnavailable"
        elif isinstance(exception, MalformedBackendReplyError):
            status_code, code = 502, "BadGateway"
        else:
            status_code, code = 500, "InternalFailure"

        document = {
            "ErrorResponse": {
                "@xmlns": CLOUDFORMATION_XMLNS,
                "Error": {
                    "Type": "Receiver",
                    "Code": code,
                    "Message": str(exception),
                },
                "RequestId": str(uuid.uuid4()),
            }
        }

        response.headers.clear()
        response.status_code = status_code
        response.set_xml(xmltodict.unparse(document))


class ResponseLogger(Handler):
    """
    Logs every proxied request together with the status of the reply.
    """

    def __call__(self, chain: HandlerChain, context: RequestContext, response: Response):
        operation = context.operation
        action = operation.action.value if operation else "-"
        stack_name = operation.stack_name if operation and operation.stack_name else "-"

        REQUEST_LOG.info(
            "%s %s %s %s => %d",
            context.request.method,
            context.request.path,
            action,
            stack_name,
            response.status_code,
        )
        if config.is_trace_logging_enabled() and not response.is_streamed:
            REQUEST_LOG.debug("reply: %s", truncate(to_str(response.get_data(), errors="replace"), 2048))
