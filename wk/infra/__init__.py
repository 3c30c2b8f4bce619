"""Infrastructure layer - Database and persistence"""

from .db import DatabaseEngine, get_engine
from .models import TaskModel, RunModel

__all__ = ["DatabaseEngine", "get_engine", "TaskModel", "RunModel"]
