"""Domain layer - Pure business entities and logic"""

from .models import Task, Run, Period, ReportRow, Report, Status
from .errors import (
    WkError,
    StorageUnavailable,
    SchemaError,
    DuplicateNameError,
    TaskNotFound,
    QueryError,
    ConfigError,
)

__all__ = [
    "Task", "Run", "Period", "ReportRow", "Report", "Status",
    "WkError", "StorageUnavailable", "SchemaError", "DuplicateNameError",
    "TaskNotFound", "QueryError", "ConfigError",
]
