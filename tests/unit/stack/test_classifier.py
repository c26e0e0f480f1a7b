import pytest

from cfproxy.stack.classifier import Action, ClassifiedRequest, classify_request, parse_pairs


def test_classify_create_change_set():
    request = classify_request(
        b"Action=CreateChangeSet&StackName=foo&ChangeSetName=cs&ChangeSetType=CREATE&Version=2010-05-15"
    )

    assert request == ClassifiedRequest(Action.CREATE_CHANGE_SET, stack_name="foo", is_create=True)
    assert request.is_tracked


@pytest.mark.parametrize(
    "payload",
    [
        "Action=CreateChangeSet&StackName=foo&ChangeSetType=UPDATE&Version=2010-05-15",
        "Action=CreateChangeSet&StackName=foo&Version=2010-05-15",
    ],
)
def test_classify_update_change_set(payload):
    request = classify_request(payload)

    assert request.action == Action.CREATE_CHANGE_SET
    assert request.stack_name == "foo"
    assert not request.is_create


def test_classify_describe_stacks():
    request = classify_request("Action=DescribeStacks&StackName=my-stack&Version=2010-05-15")

    assert request == ClassifiedRequest(Action.DESCRIBE_STACKS, stack_name="my-stack")


def test_action_anywhere_in_payload():
    request = classify_request("Version=2010-05-15&Action=DescribeStacks&StackName=foo")

    assert request.action == Action.DESCRIBE_STACKS
    assert request.stack_name == "foo"


def test_action_must_be_followed_by_another_pair():
    # the action is only recognized together with the separator of the next pair
    request = classify_request("StackName=foo&Action=DescribeStacks")

    assert request.action == Action.OTHER


@pytest.mark.parametrize(
    "payload",
    [
        "Action=ExecuteChangeSet&ChangeSetName=cs&StackName=foo&Version=2010-05-15",
        "Action=DescribeStackEvents&StackName=foo&Version=2010-05-15",
        "Action=DescribeChangeSet&StackName=foo&Version=2010-05-15",
        "",
        b"\xff\xfe",
    ],
)
def test_other_actions(payload):
    request = classify_request(payload)

    assert request.action == Action.OTHER
    assert request.stack_name is None
    assert not request.is_tracked


def test_describe_without_stack_name():
    request = classify_request("Action=DescribeStacks&Version=2010-05-15")

    assert request.action == Action.DESCRIBE_STACKS
    assert request.stack_name is None


def test_parse_pairs():
    assert parse_pairs("a=1&b=x=y&c&a=2&d=") == {"a": "1", "b": "x=y", "d": ""}


def test_values_are_not_decoded():
    request = classify_request("Action=DescribeStacks&StackName=foo%2Dbar&Version=2010-05-15")

    assert request.stack_name == "foo%2Dbar"
