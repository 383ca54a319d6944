"""
Strategic Planning Backend

Record management for a strategic-planning program: strategic issues,
strategies and projects, owned by department users and administered by
admins.
"""

import importlib.metadata

__version__ = importlib.metadata.version("strategic-planning-backend")
