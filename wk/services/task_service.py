"""
Task Service - add, remove and list named tasks.
"""

import logging
from typing import AsyncIterator, Optional

from wk.domain.models import Task
from wk.infra.db import DatabaseEngine, get_engine
from wk.infra.repository import TaskRepository, RunRepository

logger = logging.getLogger(__name__)


class TaskService:
    """The task registry. Every call runs against a fresh session."""

    def __init__(self, engine: Optional[DatabaseEngine] = None):
        self.engine = engine or get_engine()

    async def add(self, name: str) -> Task:
        """
        Create a task.

        Raises:
            DuplicateNameError: a task with this name already exists
            pydantic.ValidationError: the name is empty
        """
        task = Task(name=name)
        async with self.engine.transaction() as session:
            task = await TaskRepository(session).create(task)
        logger.info(f"Task added: {task.id}: {task.name}")
        return task

    async def remove(self, name: str) -> bool:
        """
        Delete a task and all of its runs, including an open one.

        Returns False (and changes nothing) if no such task exists.
        """
        name = name.strip()
        async with self.engine.transaction() as session:
            task_repo = TaskRepository(session)
            task = await task_repo.get_by_name(name)
            if task is None:
                return False
            deleted_runs = await RunRepository(session).delete_by_task(task.id)
            await task_repo.delete(task.id)
        logger.info(f"Task removed: {task.name} ({deleted_runs} runs deleted)")
        return True

    async def list(self) -> AsyncIterator[Task]:
        """
        Yield all tasks in insertion order.

        Lazy: rows are read while iterating. Calling list() again re-queries.
        """
        async with self.engine.transaction() as session:
            async for task in TaskRepository(session).stream_all():
                yield task
