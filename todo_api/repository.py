"""
Todo API — Task Repository
============================

What:  CRUD primitives for Task rows on one AsyncSession.
How:   Thin wrappers over select/insert/delete; every write commits so the
       response never reports data that is not yet durable.

Errors from SQLAlchemy propagate unchanged; TaskService translates them.
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.models.task import Task


class TaskRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> List[Task]:
        result = await self.session.execute(select(Task).order_by(Task.id))
        return list(result.scalars().all())

    async def find_by_id(self, task_id: int, for_update: bool = False) -> Optional[Task]:
        """
        Load one task or None.

        for_update=True issues SELECT ... FOR UPDATE, holding the row lock until
        the session commits (SQLite ignores the clause).
        """
        return await self.session.get(Task, task_id, with_for_update=for_update)

    async def insert(self, task: Task) -> Task:
        self.session.add(task)
        await self.session.commit()
        return task

    async def save(self, task: Task) -> Task:
        self.session.add(task)
        await self.session.commit()
        return task

    async def delete_by_id(self, task_id: int) -> int:
        """Deletes the row if present; returns the number of rows removed."""
        result = await self.session.execute(delete(Task).where(Task.id == task_id))
        await self.session.commit()
        return result.rowcount
