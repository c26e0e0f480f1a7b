"""
The core concepts of the HandlerChain that processes a proxied request.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from werkzeug import Response

from .utils.functions import call_safe

if TYPE_CHECKING:
    from werkzeug import Request
    from .stack.classifier import ClassifiedRequest
    from .stack.models import Stack

LOG = logging.getLogger(__name__)


class RequestContext:
    """
    Holds the state of one proxied request while it travels through the handler chain.
    """

    request: Request
    payload: Optional[bytes]
    """The raw body of the incoming request."""
    operation: Optional[ClassifiedRequest]
    """The classified request (action, stack name, create flag)."""
    stack: Optional[Stack]
    """The tracked stack the request refers to (a copy, as returned by the registry)."""
    upstream_response: Optional[Response]
    """The reply of CloudFormation, once the request has been forwarded."""
    stacks_changed: bool
    """Whether the request registered a stack or changed the status of one (triggers a broadcast)."""

    def __init__(self, request: Request):
        self.request = request
        self.payload = None
        self.operation = None
        self.stack = None
        self.upstream_response = None
        self.stacks_changed = False

    def __repr__(self):
        return f"<RequestContext {self.request.method} {self.request.path} operation={self.operation}>"


Handler = Callable[["HandlerChain", RequestContext, Response], None]
"""Request, response and finalizer handlers: called with the chain, the context and the response to populate."""

ExceptionHandler = Callable[["HandlerChain", Exception, RequestContext, Response], None]
"""Exception handlers: called with the chain, the error a request handler raised, the context and the response."""


class HandlerChain:
    """
    Processes one proxied request with four lists of handlers:

    * request handlers run in order until one of them calls ``stop()`` or raises
    * exception handlers run (all of them) if a request handler raised, and populate an error response
    * response handlers run afterwards in any case, e.g. to log the outcome
    * finalizers run last, even if a response handler failed

    Errors raised by anything but a request handler are logged and never change the flow. A chain holds the state
    of a single request, so every request gets a new one.
    """

    def __init__(
        self,
        request_handlers: List[Handler] = None,
        response_handlers: List[Handler] = None,
        finalizers: List[Handler] = None,
        exception_handlers: List[ExceptionHandler] = None,
    ) -> None:
        self.request_handlers = request_handlers or []
        self.response_handlers = response_handlers or []
        self.finalizers = finalizers or []
        self.exception_handlers = exception_handlers or []

        self.stopped = False
        self.error: Optional[Exception] = None
        self.context: Optional[RequestContext] = None

    def handle(self, context: RequestContext, response: Response):
        """
        Runs the handlers for the given context. The outcome is written into ``response``.
        """
        self.context = context
        try:
            self._run_request_handlers(response)
            for handler in self.response_handlers:
                self._call_logged(handler, "response handler", self, context, response)
        finally:
            for handler in self.finalizers:
                call_safe(
                    handler,
                    args=(self, context, response),
                    exception_message="exception while running request finalizer",
                )

    def stop(self) -> None:
        """Skips the remaining request handlers, the response handlers still run."""
        self.stopped = True

    def _run_request_handlers(self, response: Response):
        for handler in self.request_handlers:
            if self.stopped:
                return
            try:
                handler(self, self.context, response)
            except Exception as e:
                self.error = e
                self.stopped = True
                for exception_handler in self.exception_handlers:
                    self._call_logged(exception_handler, "exception handler", self, e, self.context, response)

    @staticmethod
    def _call_logged(handler: Callable, kind: str, *args):
        try:
            handler(*args)
        except Exception as e:
            if LOG.isEnabledFor(logging.DEBUG):
                LOG.exception("exception while running %s", kind)
            else:
                LOG.warning("exception while running %s: %s", kind, e)
