"""
Classification of intercepted CloudFormation query API requests. Request bodies are form-encoded
(``Action=DescribeStacks&StackName=foo&Version=2010-05-15``), values are used as they appear on the wire and are
not URL-decoded.
"""
import dataclasses
from enum import Enum
from typing import Dict, Optional, Union

from cfproxy.constants import ACTION_CREATE_CHANGE_SET, ACTION_DESCRIBE_STACKS
from cfproxy.utils.strings import to_str


class Action(Enum):
    CREATE_CHANGE_SET = ACTION_CREATE_CHANGE_SET
    DESCRIBE_STACKS = ACTION_DESCRIBE_STACKS
    OTHER = "Other"


@dataclasses.dataclass(frozen=True)
class ClassifiedRequest:
    action: Action
    stack_name: Optional[str] = None
    is_create: bool = False

    @property
    def is_tracked(self) -> bool:
        return self.action != Action.OTHER


def parse_pairs(payload: str) -> Dict[str, str]:
    """
    Splits a form-encoded payload into its key/value pairs. Values are split at the first ``=`` and are not
    decoded, pairs without ``=`` are ignored. If a key appears more than once, the first occurrence wins.

    :param payload: the request body
    :return: a dict of the pairs
    """
    pairs = {}
    for pair in payload.split("&"):
        key, sep, value = pair.partition("=")
        if not sep or key in pairs:
            continue
        pairs[key] = value
    return pairs


def classify_request(payload: Union[str, bytes]) -> ClassifiedRequest:
    """
    Determines the action of the given request body, and the stack it refers to.

    Actions are detected by the ``Action=CreateChangeSet&`` and ``Action=DescribeStacks&`` byte sequences
    anywhere in the body, regardless of the order of the pairs. A change set creates a new stack iff
    ``ChangeSetType=CREATE`` is present.

    :param payload: the raw request body
    :return: the classified request
    """
    payload = to_str(payload or b"", errors="replace")

    if f"Action={ACTION_CREATE_CHANGE_SET}&" in payload:
        action = Action.CREATE_CHANGE_SET
    elif f"Action={ACTION_DESCRIBE_STACKS}&" in payload:
        action = Action.DESCRIBE_STACKS
    else:
        return ClassifiedRequest(Action.OTHER)

    pairs = parse_pairs(payload)
    return ClassifiedRequest(
        action=action,
        stack_name=pairs.get("StackName"),
        is_create=pairs.get("ChangeSetType") == "CREATE",
    )
