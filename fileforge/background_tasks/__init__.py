from .manager import OperationRunner, SubmitResult
from .models import OperationTask
from .types import OperationType, TaskStatus

__all__ = [
    "OperationRunner",
    "OperationTask",
    "OperationType",
    "SubmitResult",
    "TaskStatus",
]
