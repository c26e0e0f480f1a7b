class CfProxyError(Exception):
    """
    Base class for errors raised by cfproxy.
    """

    def __init__(self, message: str = None):
        super().__init__(message)
        self.message = message


class UnknownStackError(CfProxyError):
    """Raised when a describe poll or a skip command references a stack that is not tracked."""

    def __init__(self, stack_name: str, message: str = None):
        message = message or f"unknown stack {stack_name}"
        super().__init__(message)
        self.stack_name = stack_name


class MalformedBackendReplyError(CfProxyError):
    """Raised when a CloudFormation reply cannot be parsed."""

    def __init__(self, message: str = None, body: bytes = None):
        super().__init__(message or "unable to parse CloudFormation reply")
        self.body = body


class UpstreamUnavailableError(CfProxyError):
    """Raised when the CloudFormation endpoint cannot be reached."""

    def __init__(self, url: str, cause: Exception = None):
        message = f"unable to reach {url}"
        if cause:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.url = url
        self.cause = cause


class NotificationError(CfProxyError):
    """Raised by chat clients when a message could not be posted or updated."""
