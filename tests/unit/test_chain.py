from unittest import mock

from cfproxy.chain import HandlerChain, RequestContext
from cfproxy.http import Response
from tests.fixtures import make_request


def _context() -> RequestContext:
    return RequestContext(make_request("POST", "/", body="Action=ListStacks&Version=2010-05-15"))


class TestHandlerChain:
    def test_stop_skips_remaining_request_handlers(self):
        def stopper(_chain: HandlerChain, context: RequestContext, response: Response):
            _chain.stop()

        handler1 = mock.MagicMock()
        handler2 = mock.MagicMock()
        response1 = mock.MagicMock()
        finalizer = mock.MagicMock()

        chain = HandlerChain(
            request_handlers=[handler1, stopper, handler2],
            response_handlers=[response1],
            finalizers=[finalizer],
        )
        chain.handle(_context(), Response())

        handler1.assert_called_once()
        handler2.assert_not_called()
        response1.assert_called_once()
        finalizer.assert_called_once()
        assert chain.stopped
        assert chain.error is None

    def test_exception_runs_exception_handlers(self):
        error = ValueError("oh no")

        def failing(_chain: HandlerChain, context: RequestContext, response: Response):
            raise error

        handler2 = mock.MagicMock()
        exception_handler1 = mock.MagicMock(side_effect=RuntimeError("nested"))
        exception_handler2 = mock.MagicMock()
        response1 = mock.MagicMock()
        finalizer = mock.MagicMock()

        chain = HandlerChain(
            request_handlers=[failing, handler2],
            response_handlers=[response1],
            finalizers=[finalizer],
            exception_handlers=[exception_handler1, exception_handler2],
        )
        context = _context()
        response = Response()
        chain.handle(context, response)

        handler2.assert_not_called()
        exception_handler1.assert_called_once_with(chain, error, context, response)
        exception_handler2.assert_called_once_with(chain, error, context, response)
        response1.assert_called_once()
        finalizer.assert_called_once()
        assert chain.error is error

    def test_failing_response_handlers_and_finalizers_are_logged(self):
        response1 = mock.MagicMock(side_effect=ValueError("response"))
        response2 = mock.MagicMock()
        finalizer1 = mock.MagicMock(side_effect=ValueError("finalizer"))
        finalizer2 = mock.MagicMock()

        chain = HandlerChain(
            response_handlers=[response1, response2],
            finalizers=[finalizer1, finalizer2],
        )
        chain.handle(_context(), Response())

        response2.assert_called_once()
        finalizer2.assert_called_once()
        assert chain.error is None
