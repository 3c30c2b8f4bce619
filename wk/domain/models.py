"""
Domain Models using Pydantic for validation.

All instants are whole epoch seconds. Sub-second precision is not kept.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator


class Task(BaseModel):
    """
    A named unit of trackable work.

    Examples: "writing", "reviews", "email"
    """
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)


class Run(BaseModel):
    """
    One continuous interval of tracked time against a task.

    A run is open while end_time is None. Store-wide, at most one run
    is open at any time.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    task_id: int
    start_time: int
    end_time: Optional[int] = None

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "Run":
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def duration(self, now: int) -> int:
        """Seconds covered by this run, counting an open run up to `now`"""
        end = self.end_time if self.end_time is not None else now
        return end - self.start_time


class Period(str, Enum):
    """Report window size"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ReportRow(BaseModel):
    """One ranked line of a report"""
    rank: int
    task_id: int
    name: str
    seconds: int
    percent: int


class Report(BaseModel):
    """Aggregated durations for a window [window_start, generated_at)"""
    period: Period
    window_start: int
    generated_at: int
    total_seconds: int = 0
    rows: List[ReportRow] = Field(default_factory=list)


class Status(BaseModel):
    """Current tracker state, derived from the open run (if any)"""
    task: Optional[Task] = None
    run: Optional[Run] = None
    elapsed_seconds: int = 0

    @property
    def is_running(self) -> bool:
        return self.run is not None
