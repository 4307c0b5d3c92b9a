import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from ..files.types import OperationResult
from .types import OperationType, TaskStatus


class OperationTask(BaseModel):
    """Runtime representation of a submitted file operation."""

    task_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    operation: OperationType
    name: str
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    result: OperationResult | None = None
    error: str | None = None
