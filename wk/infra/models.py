"""
SQLAlchemy ORM models.
Separated from db.py for cleaner imports.
"""

from .db import TaskModel, RunModel, Base

__all__ = ["TaskModel", "RunModel", "Base"]
