import threading

import pytest

from cfproxy.exceptions import UnknownStackError
from cfproxy.stack import Stack, StackRegistry, StackStatus


class TestStackRegistry:
    def test_add_assigns_sequential_ids(self, registry):
        assert registry.add(Stack(name="foo")) == 0
        assert registry.add(Stack(name="bar")) == 1
        assert registry.add(Stack(name="baz", create=True)) == 2
        assert len(registry) == 3

        assert [(s.id, s.name) for s in registry.snapshot()] == [(0, "foo"), (1, "bar"), (2, "baz")]

    def test_get_by_name(self, registry):
        registry.add(Stack(name="foo", create=True))
        registry.add(Stack(name="bar"))

        stack = registry.get_by_name("bar")
        assert stack.id == 1
        assert stack.name == "bar"
        assert not stack.create

    def test_get_by_name_unknown(self, registry):
        registry.add(Stack(name="foo"))

        with pytest.raises(UnknownStackError) as e:
            registry.get_by_name("bar")

        assert e.value.stack_name == "bar"
        assert e.value.message == "unknown stack bar"

    def test_get_unknown_id(self, registry):
        with pytest.raises(UnknownStackError):
            registry.get(0)

    def test_returned_stacks_are_copies(self, registry):
        registry.add(Stack(name="foo"))

        stack = registry.get_by_name("foo")
        stack.status = StackStatus.FAILED
        snapshot = registry.snapshot()
        snapshot[0].name = "changed"

        assert registry.get(0).status == StackStatus.WORKING
        assert registry.get(0).name == "foo"

    def test_duplicate_names_prefer_working_stack(self, registry):
        registry.add(Stack(name="foo"))
        registry.apply_backend_status(0, "UPDATE_ROLLBACK_COMPLETE")
        registry.add(Stack(name="foo"))

        assert registry.get_by_name("foo").id == 1

        registry.apply_backend_status(1, "CREATE_COMPLETE")
        assert registry.get_by_name("foo").id == 0

    def test_mark_skipped(self, registry):
        registry.add(Stack(name="foo", create=True))

        stack = registry.mark_skipped("foo")

        assert stack.status == StackStatus.SKIPPED
        assert stack.end is not None
        assert registry.get(0).status == StackStatus.SKIPPED

    def test_mark_skipped_unknown(self, registry):
        with pytest.raises(UnknownStackError):
            registry.mark_skipped("foo")

    def test_mark_skipped_finished_stack_keeps_status(self, registry):
        registry.add(Stack(name="foo"))
        registry.apply_backend_status(0, "CREATE_COMPLETE")

        stack = registry.mark_skipped("foo")

        assert stack.status == StackStatus.DONE

    def test_apply_backend_status(self, registry):
        registry.add(Stack(name="foo"))

        assert not registry.apply_backend_status(0, "UPDATE_IN_PROGRESS")
        assert not registry.apply_backend_status(0, None)
        assert registry.apply_backend_status(0, "UPDATE_ROLLBACK_IN_PROGRESS")
        assert registry.get(0).status == StackStatus.FAILED

        # duplicate polls of a finished stack do not flap
        assert not registry.apply_backend_status(0, "CREATE_COMPLETE")
        assert registry.get(0).status == StackStatus.FAILED

    def test_concurrent_adds(self):
        registry = StackRegistry()
        ids = []
        ids_lock = threading.Lock()

        def _add(i):
            stack_id = registry.add(Stack(name=f"stack-{i}"))
            with ids_lock:
                ids.append(stack_id)

        threads = [threading.Thread(target=_add, args=(i,)) for i in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert sorted(ids) == list(range(50))
        assert [s.id for s in registry.snapshot()] == list(range(50))
