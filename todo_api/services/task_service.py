"""
Todo API — Task Service
=========================

What:  One method per endpoint: list, get, create, update, mark done, delete.
How:   Each call opens a TaskRepository on the request's session, converts a
       missing row into NotFoundError and any SQLAlchemy failure into
       StorageError carrying the driver's message.

Consistency:
    update_task() and mark_done() load the row with SELECT ... FOR UPDATE and
    save it in the same transaction. A concurrent delete either waits for the
    lock or has already removed the row (→ 404); it cannot be undone by the
    save.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.exceptions import NotFoundError, StorageError
from todo_api.models.task import Task
from todo_api.repository import TaskRepository
from todo_api.schemas.task import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)


def _storage_error(action: str, e: SQLAlchemyError) -> StorageError:
    logger.error("Database error while %s: %s", action, str(e))
    return StorageError(message=str(e), context={"error_type": type(e).__name__})


class TaskService:
    """
    Handler logic for the /todos endpoints.

    Stateless: the session is passed in per call.
    """

    async def list_tasks(self, db: AsyncSession) -> List[TaskResponse]:
        try:
            tasks = await TaskRepository(db).find_all()
        except SQLAlchemyError as e:
            raise _storage_error("listing tasks", e) from e
        return [TaskResponse.model_validate(task) for task in tasks]

    async def get_task(self, db: AsyncSession, task_id: int) -> TaskResponse:
        """
        Raises:
            NotFoundError: No task with this id (→ 404)
            StorageError: Query failed (→ 500)
        """
        try:
            task = await TaskRepository(db).find_by_id(task_id)
        except SQLAlchemyError as e:
            raise _storage_error(f"fetching task {task_id}", e) from e

        if task is None:
            raise NotFoundError(resource="Task", resource_id=task_id)
        return TaskResponse.model_validate(task)

    async def create_task(self, db: AsyncSession, payload: TaskCreate) -> TaskResponse:
        """Inserts a new task; `done` always starts False."""
        task = Task(title=payload.title, description=payload.description, done=False)
        try:
            task = await TaskRepository(db).insert(task)
        except SQLAlchemyError as e:
            raise _storage_error("creating task", e) from e

        logger.info("Task %s created", task.id)
        return TaskResponse.model_validate(task)

    async def update_task(
        self, db: AsyncSession, task_id: int, payload: TaskUpdate
    ) -> TaskResponse:
        """
        Overwrites title and/or description, preserving id and done.

        Fields missing from the body (or sent as null) keep their stored value.
        """
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        repo = TaskRepository(db)
        try:
            task = await repo.find_by_id(task_id, for_update=True)
            if task is None:
                raise NotFoundError(resource="Task", resource_id=task_id)

            for field, value in changes.items():
                setattr(task, field, value)
            task = await repo.save(task)
        except SQLAlchemyError as e:
            raise _storage_error(f"updating task {task_id}", e) from e

        logger.info("Task %s updated (%s)", task_id, ", ".join(sorted(changes)) or "no changes")
        return TaskResponse.model_validate(task)

    async def mark_done(self, db: AsyncSession, task_id: int) -> TaskResponse:
        repo = TaskRepository(db)
        try:
            task = await repo.find_by_id(task_id, for_update=True)
            if task is None:
                raise NotFoundError(resource="Task", resource_id=task_id)

            task.done = True
            task = await repo.save(task)
        except SQLAlchemyError as e:
            raise _storage_error(f"marking task {task_id} done", e) from e

        logger.info("Task %s marked done", task_id)
        return TaskResponse.model_validate(task)

    async def delete_task(self, db: AsyncSession, task_id: int) -> None:
        """Deletes the task. An id with no row is not an error."""
        try:
            removed = await TaskRepository(db).delete_by_id(task_id)
        except SQLAlchemyError as e:
            raise _storage_error(f"deleting task {task_id}", e) from e

        if removed:
            logger.info("Task %s deleted", task_id)
        else:
            logger.info("Delete of task %s matched no row", task_id)


# ── Singleton Instance ────────────────────────────────────────────────────
task_service = TaskService()
