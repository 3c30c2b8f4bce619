"""
Timer Service - Core time tracking logic.

The tracker has two store-wide states: idle (no open run) and running
(exactly one open run). State lives only in the runs table; the open run is
looked up on every call.
"""

import logging
from typing import Callable, Optional

from wk.domain.errors import TaskNotFound
from wk.domain.models import Run, Status
from wk.infra.db import DatabaseEngine, get_engine
from wk.infra.repository import TaskRepository, RunRepository
from wk.utils import epoch_now

logger = logging.getLogger(__name__)


class TimerService:
    """
    Starts and stops runs.

    `clock` returns the current time in epoch seconds. It is sampled once
    per operation.
    """

    def __init__(self, engine: Optional[DatabaseEngine] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.engine = engine or get_engine()
        self.clock = clock or epoch_now

    async def start(self, name: str) -> Run:
        """
        Stop any open run, then open a new run for the named task.

        The stop and the insert happen in one transaction, and the new run's
        start_time equals the closed run's end_time.

        Raises:
            TaskNotFound: no task has this name. The previous run is still
                closed and the tracker is left idle.
        """
        now = self.clock()
        name = name.strip()
        run = None
        async with self.engine.transaction() as session:
            runs = RunRepository(session)
            closed = await runs.close_open(now)
            task = await TaskRepository(session).get_by_name(name)
            if task is not None:
                run = await runs.create(Run(task_id=task.id, start_time=now))

        if closed:
            logger.info(f"Closed {closed} open run(s) at {now}")
        if run is None:
            raise TaskNotFound(name)
        logger.info(f"Run {run.id} started for '{name}' at {now}")
        return run

    async def stop(self) -> int:
        """
        Close the open run, if any.

        Returns the number of runs closed; 0 means the tracker was idle.
        """
        now = self.clock()
        async with self.engine.transaction() as session:
            closed = await RunRepository(session).close_open(now)
        if closed:
            logger.info(f"Closed {closed} open run(s) at {now}")
        else:
            logger.debug("Stop requested while idle")
        return closed

    async def status(self) -> Status:
        """Describe the open run and how long it has been going"""
        now = self.clock()
        async with self.engine.transaction() as session:
            run = await RunRepository(session).get_open()
            if run is None:
                return Status()
            task = await TaskRepository(session).get_by_id(run.task_id)
        return Status(task=task, run=run, elapsed_seconds=run.duration(now))
