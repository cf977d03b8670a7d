"""cronloom scheduling service.

This module provides the named-job registry that applies shared defaults,
routes job failures to a global error sink and saves its state to disk.
"""

from .service import SchedulerService

__all__ = ["SchedulerService"]
