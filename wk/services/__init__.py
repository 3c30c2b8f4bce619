"""Services layer - Business logic"""

from .task_service import TaskService
from .timer_service import TimerService
from .report_service import ReportService

__all__ = ["TaskService", "TimerService", "ReportService"]
