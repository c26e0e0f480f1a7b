import dataclasses
import time
from enum import Enum
from typing import Optional


class StackStatus(Enum):
    WORKING = "working"
    SKIPPED = "skipped"
    DONE = "done"
    FAILED = "failed"

    def __str__(self):
        return self.value

    def __repr__(self):
        return self.name


TERMINAL_STATUSES = (StackStatus.SKIPPED, StackStatus.DONE, StackStatus.FAILED)


def status_for_backend_status(backend_status: Optional[str]) -> Optional[StackStatus]:
    """
    Maps the ``StackStatus`` reported by CloudFormation to the status of a tracked stack.

    :param backend_status: the CloudFormation stack status, e.g., ``UPDATE_ROLLBACK_FAILED``
    :return: the new status, or None if the stack is still in progress as far as the proxy is concerned
    """
    if not backend_status:
        return None
    if backend_status in ("CREATE_COMPLETE", "DELETE_COMPLETE"):
        return StackStatus.DONE
    if "FAILED" in backend_status or "ROLLBACK" in backend_status:
        return StackStatus.FAILED
    return None


@dataclasses.dataclass
class Stack:
    """
    One tracked deployment attempt (a change set that is created and then executed against a stack).
    """

    name: str
    create: bool = False
    id: int = -1
    status: StackStatus = StackStatus.WORKING
    start: float = dataclasses.field(default_factory=time.time)
    end: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def elapsed(self, now: float = None) -> float:
        """Seconds between the registration and the end of the operation (or ``now`` if it is still running)."""
        end = self.end if self.end is not None else (now if now is not None else time.time())
        return max(0.0, end - self.start)

    def transition(self, status: StackStatus, now: float = None) -> bool:
        """
        Moves a working stack into the given status and stamps ``end`` if the new status is terminal. Terminal
        stacks never change again.

        :param status: the new status
        :param now: the time of the transition, defaults to the current time
        :return: True if the status changed
        """
        if self.is_terminal or status == self.status:
            return False

        self.status = status
        if self.is_terminal:
            self.end = now if now is not None else time.time()
        return True

    def apply_backend_status(self, backend_status: Optional[str], now: float = None) -> bool:
        """
        Advances the stack according to the CloudFormation status of the stack (see
        ``status_for_backend_status``). Backend statuses can never skip a stack.

        :param backend_status: the CloudFormation stack status
        :param now: the time of the transition, defaults to the current time
        :return: True if the status changed
        """
        status = status_for_backend_status(backend_status)
        if status is None:
            return False
        return self.transition(status, now=now)
