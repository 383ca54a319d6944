"""
Allowed values for record fields.

Status transitions are not enforced: any authorized update may set any value
from the set.
"""

from enum import Enum


class StrategicIssueStatus(str, Enum):
    """Lifecycle of a strategic issue."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class ProjectStatus(str, Enum):
    """Project lifecycle: planning -> active -> completed, or cancelled."""

    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProjectType(str, Enum):
    """Whether a project is new or continues a previous one."""

    NEW = "new"
    CONTINUOUS = "continuous"
