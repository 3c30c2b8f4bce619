"""
Repository Pattern Implementation.

Repositories work on a session handed to them by the service layer and never
commit on their own, so a service can compose several calls into one
transaction (see DatabaseEngine.transaction).
"""

from typing import AsyncIterator, Dict, Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wk.domain.errors import DuplicateNameError, QueryError
from wk.domain.models import Task, Run
from wk.infra.db import TaskModel, RunModel


def _to_run(run_model: RunModel) -> Run:
    """Convert a stored row; rows breaking the Run invariants are a storage fault"""
    try:
        return Run.model_validate(run_model)
    except ValidationError as e:
        raise QueryError(f"Corrupt run row {run_model.id}: {e.errors()[0]['msg']}") from e


class TaskRepository:
    """
    Handles all Task-related database operations.

    Converts between domain models (Pydantic) and ORM models (SQLAlchemy).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, task: Task) -> Task:
        """Insert a new task. Raises DuplicateNameError if the name is taken."""
        task_model = TaskModel(name=task.name)
        self.session.add(task_model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateNameError(task.name) from e
        return Task.model_validate(task_model)

    async def get_by_name(self, name: str) -> Optional[Task]:
        result = await self.session.execute(
            select(TaskModel).where(TaskModel.name == name)
        )
        task_model = result.scalar_one_or_none()
        return Task.model_validate(task_model) if task_model else None

    async def get_by_id(self, task_id: int) -> Optional[Task]:
        task_model = await self.session.get(TaskModel, task_id)
        return Task.model_validate(task_model) if task_model else None

    async def get_by_ids(self, task_ids: Iterable[int]) -> Dict[int, Task]:
        result = await self.session.execute(
            select(TaskModel).where(TaskModel.id.in_(list(task_ids)))
        )
        return {tm.id: Task.model_validate(tm) for tm in result.scalars().all()}

    async def stream_all(self) -> AsyncIterator[Task]:
        """Yield every task in primary-key order without loading them all"""
        result = await self.session.stream_scalars(
            select(TaskModel).order_by(TaskModel.id)
        )
        async for task_model in result:
            yield Task.model_validate(task_model)

    async def delete(self, task_id: int) -> None:
        await self.session.execute(
            delete(TaskModel).where(TaskModel.id == task_id)
        )


class RunRepository:
    """
    Handles all Run-related database operations.

    The open run is never cached: it is always the row with end_time NULL.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, run: Run) -> Run:
        run_model = RunModel(
            task_id=run.task_id,
            start_time=run.start_time,
            end_time=run.end_time
        )
        self.session.add(run_model)
        await self.session.flush()
        return Run.model_validate(run_model)

    async def get_open(self) -> Optional[Run]:
        """Get the currently open run, if any"""
        result = await self.session.execute(
            select(RunModel)
            .where(RunModel.end_time.is_(None))
            .order_by(RunModel.start_time.desc())
            .limit(1)
        )
        run_model = result.scalar_one_or_none()
        return _to_run(run_model) if run_model else None

    async def close_open(self, end_time: int) -> int:
        """
        Set end_time on every open run.

        end_time is clamped to the run's start_time, so a clock that moved
        backwards closes the run with zero length.

        Returns the number of runs closed (0 when idle).
        """
        result = await self.session.execute(
            update(RunModel)
            .where(RunModel.end_time.is_(None))
            .values(end_time=func.max(RunModel.start_time, end_time))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def get_started_between(self, start: int, end: int) -> List[Run]:
        """Runs with start <= start_time < end, oldest first"""
        result = await self.session.execute(
            select(RunModel)
            .where(RunModel.start_time >= start, RunModel.start_time < end)
            .order_by(RunModel.start_time, RunModel.id)
        )
        return [_to_run(rm) for rm in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(RunModel))
        return result.scalar_one()

    async def delete_by_task(self, task_id: int) -> int:
        """Delete all runs of a task. Returns count of deleted rows."""
        result = await self.session.execute(
            delete(RunModel).where(RunModel.task_id == task_id)
        )
        return result.rowcount
