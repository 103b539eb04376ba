"""Update orchestration package for safeupdate.

This package contains the components that drive a whole update pass:
- UpdatePlanner: Classifies a project against an upstream release and
  prepares review material for every file needing a merge.
- UpdateLogger: Structured logging of an update pass to a session log file.
"""

from safeupdate.orchestration.update_logger import UpdateLogger
from safeupdate.orchestration.update_planner import UpdatePlanner

__all__ = ["UpdateLogger", "UpdatePlanner"]
