"""
Task persistence.

Every lookup and mutation by id is filtered by the owning user as well, so a
request bearing another user's id can never see or touch the row.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from storage.db import Database, storage_errors
from todo_ai.models import Task

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, user_id, title, description, due_date, priority, raw_text, "
    "completed, created_at, updated_at"
)


class TaskStore(ABC):
    @abstractmethod
    async def create(self, task: Task) -> Task: ...

    @abstractmethod
    async def get(self, task_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Task]: ...

    @abstractmethod
    async def list_by_owner(self, user_id: uuid.UUID) -> List[Task]: ...

    @abstractmethod
    async def update(self, task: Task) -> Optional[Task]:
        """Persist ``task``; returns None when (id, user_id) matches no row."""

    @abstractmethod
    async def delete(self, task_id: uuid.UUID, user_id: uuid.UUID) -> bool: ...


class PostgresTaskStore(TaskStore):
    def __init__(self, db: Database):
        self.db = db

    async def create(self, task: Task) -> Task:
        query = f"""
            INSERT INTO tasks (
                id, user_id, title, description, due_date, priority,
                raw_text, completed, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING {_COLUMNS}
        """
        async with storage_errors("create task"):
            record = await self.db.fetchrow(
                query,
                task.id,
                task.user_id,
                task.title,
                task.description,
                task.due_date,
                task.priority,
                task.raw_text,
                task.completed,
                task.created_at,
                task.updated_at,
            )
        logger.debug(f"Created task {task.id} for user {task.user_id}")
        return Task.model_validate(dict(record))

    async def get(self, task_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Task]:
        query = f"SELECT {_COLUMNS} FROM tasks WHERE id = $1 AND user_id = $2"
        async with storage_errors("fetch task"):
            record = await self.db.fetchrow(query, task_id, user_id)
        return Task.model_validate(dict(record)) if record else None

    async def list_by_owner(self, user_id: uuid.UUID) -> List[Task]:
        query = f"SELECT {_COLUMNS} FROM tasks WHERE user_id = $1 ORDER BY created_at, id"
        async with storage_errors("list tasks"):
            records = await self.db.fetch(query, user_id)
        return [Task.model_validate(dict(r)) for r in records]

    async def update(self, task: Task) -> Optional[Task]:
        # user_id is part of the filter, never of the SET list
        query = f"""
            UPDATE tasks SET
                title = $3,
                description = $4,
                due_date = $5,
                priority = $6,
                raw_text = $7,
                completed = $8,
                updated_at = $9
            WHERE id = $1 AND user_id = $2
            RETURNING {_COLUMNS}
        """
        async with storage_errors("update task"):
            record = await self.db.fetchrow(
                query,
                task.id,
                task.user_id,
                task.title,
                task.description,
                task.due_date,
                task.priority,
                task.raw_text,
                task.completed,
                task.updated_at,
            )
        return Task.model_validate(dict(record)) if record else None

    async def delete(self, task_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        query = "DELETE FROM tasks WHERE id = $1 AND user_id = $2"
        async with storage_errors("delete task"):
            status = await self.db.execute(query, task_id, user_id)
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return status.split()[-1] != "0"
