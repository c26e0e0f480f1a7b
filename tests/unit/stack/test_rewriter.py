from cfproxy.stack.models import Stack
from cfproxy.stack.rewriter import short_circuit
from tests.fixtures import describe_stacks_reply


def test_short_circuit_create_stack():
    body = describe_stacks_reply("foo", "CREATE_IN_PROGRESS")

    rewritten = short_circuit(Stack(name="foo", create=True), body)

    assert rewritten == body.replace("CREATE_IN_PROGRESS", "CREATE_COMPLETE").encode("utf-8")


def test_short_circuit_update_stack():
    body = describe_stacks_reply("foo", "UPDATE_ROLLBACK_IN_PROGRESS").encode("utf-8")

    rewritten = short_circuit(Stack(name="foo", create=False), body)

    assert b"<StackStatus>UPDATE_COMPLETE</StackStatus>" in rewritten
    assert b"ROLLBACK" not in rewritten
    assert rewritten.replace(b"UPDATE_COMPLETE", b"UPDATE_ROLLBACK_IN_PROGRESS") == body


def test_every_status_is_replaced():
    body = (
        b"<Stacks><member><StackStatus>CREATE_FAILED</StackStatus></member>"
        b"<member><StackStatus>\n  UPDATE_IN_PROGRESS\n</StackStatus></member></Stacks>"
    )

    rewritten = short_circuit(Stack(name="foo"), body)

    assert rewritten == (
        b"<Stacks><member><StackStatus>UPDATE_COMPLETE</StackStatus></member>"
        b"<member><StackStatus>UPDATE_COMPLETE</StackStatus></member></Stacks>"
    )


def test_body_without_status_is_unchanged():
    body = b"<ErrorResponse><Error><Code>Throttling</Code></Error></ErrorResponse>"

    assert short_circuit(Stack(name="foo"), body) == body
