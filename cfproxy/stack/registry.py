import dataclasses
import logging
import threading
import time
from typing import List, Optional

from cfproxy.exceptions import UnknownStackError

from .models import Stack, StackStatus

LOG = logging.getLogger(__name__)


class StackRegistry:
    """
    Thread-safe, append-only collection of the stacks seen by the proxy, in the order their change sets were
    created. A single lock guards all reads and writes. It is only held for the in-memory operation, never
    across network calls.

    Stacks handed out by the registry are copies, all mutations go through the registry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stacks: List[Stack] = []

    def add(self, stack: Stack) -> int:
        """
        Appends the stack and assigns its id, which is the number of stacks registered before it.

        :param stack: the stack to register
        :return: the id of the stack
        """
        with self._lock:
            stack.id = len(self._stacks)
            self._stacks.append(stack)
            LOG.debug("registered stack %s with id %d (create=%s)", stack.name, stack.id, stack.create)
            return stack.id

    def get(self, stack_id: int) -> Stack:
        with self._lock:
            if stack_id < 0 or stack_id >= len(self._stacks):
                raise UnknownStackError(str(stack_id), f"unknown stack id {stack_id}")
            return dataclasses.replace(self._stacks[stack_id])

    def get_by_name(self, name: str) -> Stack:
        """
        Looks up a stack by name. If a stack was deployed several times, the first attempt that is still working
        is returned, otherwise the first attempt.

        :param name: the stack name
        :return: a copy of the stack
        :raises UnknownStackError: if no stack with that name has been registered
        """
        with self._lock:
            return dataclasses.replace(self._find(name))

    def snapshot(self) -> List[Stack]:
        """Returns copies of all stacks in registration order."""
        with self._lock:
            return [dataclasses.replace(stack) for stack in self._stacks]

    def mark_skipped(self, name: str) -> Stack:
        """
        Marks the (working) stack with the given name as skipped. Stacks that already finished keep their status.

        :param name: the stack name
        :return: a copy of the stack after the transition
        :raises UnknownStackError: if no stack with that name has been registered
        """
        with self._lock:
            stack = self._find(name)
            if stack.transition(StackStatus.SKIPPED):
                LOG.info("stack %s (id %d) skipped", stack.name, stack.id)
            else:
                LOG.info("not skipping stack %s, it is already %s", stack.name, stack.status)
            return dataclasses.replace(stack)

    def apply_backend_status(self, stack_id: int, backend_status: Optional[str]) -> bool:
        """
        Advances the stack with the given id according to a CloudFormation stack status.

        :param stack_id: the id of the stack
        :param backend_status: the ``StackStatus`` reported by CloudFormation
        :return: True if the status of the stack changed
        """
        now = time.time()
        with self._lock:
            if stack_id < 0 or stack_id >= len(self._stacks):
                raise UnknownStackError(str(stack_id), f"unknown stack id {stack_id}")
            stack = self._stacks[stack_id]
            changed = stack.apply_backend_status(backend_status, now=now)
            if changed:
                LOG.info(
                    "stack %s (id %d) is %s (%s)", stack.name, stack.id, stack.status, backend_status
                )
            return changed

    def _find(self, name: str) -> Stack:
        first = None
        for stack in self._stacks:
            if stack.name != name:
                continue
            if stack.status == StackStatus.WORKING:
                return stack
            if first is None:
                first = stack

        if first is None:
            raise UnknownStackError(name)
        return first

    def __len__(self):
        with self._lock:
            return len(self._stacks)
