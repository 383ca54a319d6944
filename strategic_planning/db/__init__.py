"""
Database package for the Strategic Planning backend.
"""

from .base import Base, get_db, get_engine, get_session_local, init_database
from .models import ProjectModel, StrategicIssueModel, StrategyModel, UserModel

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_local",
    "init_database",
    "ProjectModel",
    "StrategicIssueModel",
    "StrategyModel",
    "UserModel",
]
