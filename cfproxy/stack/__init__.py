from .models import Stack, StackStatus
from .registry import StackRegistry

__all__ = ["Stack", "StackStatus", "StackRegistry"]
