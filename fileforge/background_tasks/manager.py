import asyncio
from datetime import datetime
from typing import Coroutine

from pydantic import BaseModel

from ..files.types import OperationResult
from ..logger import logger
from .models import OperationTask
from .types import OperationType, TaskStatus


class SubmitResult(BaseModel):
    """Result returned when submitting an operation."""

    model_config = {"arbitrary_types_allowed": True}

    task_id: str
    task: OperationTask
    awaitable: asyncio.Future[OperationResult]


class OperationRunner:
    """Runs file operations in the background so callers return immediately."""

    def __init__(self):
        self._tasks: dict[str, OperationTask] = {}
        self._asyncio_tasks: dict[str, asyncio.Task] = {}
        self._futures: dict[str, asyncio.Future[OperationResult]] = {}

    def submit(
        self,
        operation: OperationType,
        name: str,
        coro: Coroutine[None, None, OperationResult],
    ) -> SubmitResult:
        """
        Submit an operation coroutine.

        Args:
            operation: Type of the operation
            name: Display name, usually the target file name
            coro: Instantiated coroutine returning an OperationResult

        Returns:
            SubmitResult containing task_id and an awaitable Future

        Example:
            result = runner.submit(
                OperationType.RENAME, "notes.txt", manager.rename(file_id, "todo.txt")
            )
            # Immediate return
            return {"task_id": result.task_id}

            # Or wait for completion
            outcome = await result.awaitable
        """
        task = OperationTask(operation=operation, name=name)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[OperationResult] = loop.create_future()

        self._tasks[task.task_id] = task
        self._futures[task.task_id] = future

        async def run_task():
            task.status = TaskStatus.RUNNING
            task.started_at = datetime.now()

            try:
                outcome = await coro
            except Exception as e:
                task.status = TaskStatus.FAILED
                task.ended_at = datetime.now()
                task.error = str(e)
                future.set_result(OperationResult(success=False, message=str(e)))
                logger.exception(f"Task {task.task_id} ({task.name}) failed: {e}")
                return
            finally:
                # Only the task record outlives the run; callers hold the future
                self._asyncio_tasks.pop(task.task_id, None)
                self._futures.pop(task.task_id, None)

            task.status = TaskStatus.COMPLETED if outcome.success else TaskStatus.FAILED
            task.ended_at = datetime.now()
            task.result = outcome
            if not outcome.success:
                task.error = outcome.message
            future.set_result(outcome)
            logger.debug(
                f"Task {task.task_id} ({task.name}) finished with status {task.status.value}"
            )

        self._asyncio_tasks[task.task_id] = asyncio.create_task(run_task())
        logger.debug(
            f"Task {task.task_id} ({task.name}) submitted, operation={operation.value}"
        )

        return SubmitResult(task_id=task.task_id, task=task, awaitable=future)

    @property
    def is_busy(self) -> bool:
        return bool(self.get_active_tasks())

    def get_task(self, task_id: str) -> OperationTask | None:
        """Get a task by ID."""
        return self._tasks.get(task_id)

    def get_all_tasks(self) -> list[OperationTask]:
        """Get all tasks."""
        return list(self._tasks.values())

    def get_active_tasks(self) -> list[OperationTask]:
        """Get pending and running tasks."""
        return [
            t
            for t in self._tasks.values()
            if t.status in (TaskStatus.PENDING, TaskStatus.RUNNING)
        ]

    def remove_task(self, task_id: str) -> bool:
        """Forget a finished task; pending and running tasks are kept."""
        task = self._tasks.get(task_id)
        if not task:
            return False
        if task.status in (TaskStatus.PENDING, TaskStatus.RUNNING):
            return False
        del self._tasks[task_id]
        return True

    def clear_completed(self) -> int:
        """Forget all finished tasks."""
        to_remove = [
            tid
            for tid, t in self._tasks.items()
            if t.status not in (TaskStatus.PENDING, TaskStatus.RUNNING)
        ]
        for tid in to_remove:
            del self._tasks[tid]
        return len(to_remove)
