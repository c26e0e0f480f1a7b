import re
from typing import Union

from cfproxy.constants import STACK_STATUS_CREATE_COMPLETE, STACK_STATUS_UPDATE_COMPLETE
from cfproxy.utils.strings import to_bytes

from .models import Stack

STACK_STATUS_PATTERN = re.compile(rb"<StackStatus>.*?</StackStatus>", re.DOTALL)


def forged_stack_status(stack: Stack) -> str:
    return STACK_STATUS_CREATE_COMPLETE if stack.create else STACK_STATUS_UPDATE_COMPLETE


def short_circuit(stack: Stack, body: Union[str, bytes]) -> bytes:
    """
    Rewrites every ``StackStatus`` element of a ``DescribeStacks`` reply to the successful terminal status of
    the given stack (``CREATE_COMPLETE`` for new stacks, ``UPDATE_COMPLETE`` otherwise), so a deployment tool
    polling the stack continues as if the operation completed. Everything else in the body is left untouched.

    :param stack: the skipped stack
    :param body: the reply of CloudFormation
    :return: the rewritten body
    """
    injected = b"<StackStatus>%s</StackStatus>" % to_bytes(forged_stack_status(stack))
    return STACK_STATUS_PATTERN.sub(lambda _: injected, to_bytes(body))
