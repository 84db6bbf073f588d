"""Global FastAPI dependencies.

This module provides:
- get_clock: Time source for the workflow (overridden in tests)

Database sessions come from database.get_db.
"""

from .workflow.clock import Clock, system_clock


def get_clock() -> Clock:
    """Return the clock used to stamp apply/approve/update times."""
    return system_clock
