"""
Report Generation Service.

Aggregates run durations per task over a trailing window, ranks the tasks
and renders the result with Jinja2 templates.
"""

import datetime
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional
from jinja2 import Environment, FileSystemLoader

from wk.domain.models import Period, Report, ReportRow, Run
from wk.infra.db import DatabaseEngine, get_engine
from wk.infra.repository import TaskRepository, RunRepository
from wk.utils import epoch_now, format_duration, get_resource_path

logger = logging.getLogger(__name__)


def window_start(period: Period, now: int) -> int:
    """
    First instant of the report window, in local time.

    DAY is today from midnight, WEEK is today plus the six days before it,
    MONTH and YEAR start at the first day of the current month/year.
    """
    today = datetime.datetime.fromtimestamp(now).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    if period is Period.DAY:
        start = today
    elif period is Period.WEEK:
        start = today - datetime.timedelta(days=6)
    elif period is Period.MONTH:
        start = today.replace(day=1)
    else:
        start = today.replace(month=1, day=1)
    return int(start.timestamp())


def percent_of(seconds: int, total: int) -> int:
    """100 * seconds / total rounded half up; 0 when total is 0"""
    if total <= 0:
        return 0
    return (200 * seconds + total) // (2 * total)


def rank_totals(totals: Dict[int, int], names: Dict[int, str]) -> List[ReportRow]:
    """
    Order tasks by descending duration and assign competition ranks.

    Equal durations share a rank and the next distinct duration skips the
    tied positions (1, 1, 3). Ties are ordered by task id.
    """
    total = sum(totals.values())
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    rows = []
    rank = 0
    previous = None
    for position, (task_id, seconds) in enumerate(ordered, start=1):
        if seconds != previous:
            rank = position
            previous = seconds
        rows.append(ReportRow(
            rank=rank,
            task_id=task_id,
            name=names[task_id],
            seconds=seconds,
            percent=percent_of(seconds, total)
        ))
    return rows


def sum_by_task(runs: List[Run], now: int) -> Dict[int, int]:
    """Total seconds per task id; an open run counts up to `now`"""
    totals: Dict[int, int] = {}
    for run in runs:
        totals[run.task_id] = totals.get(run.task_id, 0) + run.duration(now)
    return totals


class ReportService:
    """
    Builds duration reports from the runs table.
    """

    def __init__(self, engine: Optional[DatabaseEngine] = None,
                 clock: Optional[Callable[[], int]] = None,
                 template_dir: Optional[Path] = None):
        """
        Args:
            engine: Database engine, defaults to the process-wide one
            clock: Returns now in epoch seconds, sampled once per report
            template_dir: Directory containing Jinja2 templates
        """
        self.engine = engine or get_engine()
        self.clock = clock or epoch_now

        if template_dir is None:
            template_dir = get_resource_path("resources/templates")
        self.template_dir = template_dir

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )
        self.env.filters['format_duration'] = format_duration

    async def generate_report(self, period: Period) -> Report:
        """
        Aggregate runs started in [window start, now).

        Tasks with no run in the window are left out.
        """
        now = self.clock()
        start = window_start(period, now)
        logger.debug(f"Report window for {period.value}: [{start}, {now})")

        async with self.engine.transaction() as session:
            runs = await RunRepository(session).get_started_between(start, now)
            tasks = await TaskRepository(session).get_by_ids({r.task_id for r in runs})

        # Runs whose task row is gone have no name to report under
        runs = [r for r in runs if r.task_id in tasks]
        totals = sum_by_task(runs, now)
        names = {task_id: task.name for task_id, task in tasks.items()}

        return Report(
            period=period,
            window_start=start,
            generated_at=now,
            total_seconds=sum(totals.values()),
            rows=rank_totals(totals, names)
        )

    def render(self, report: Report, template_name: str = "info.txt") -> str:
        """Render a report with the named template"""
        template = self.env.get_template(template_name)
        return template.render(report=report)
