"""cronloom storage layer.

This module persists scheduler state (job names, expressions, status,
metrics and history) as a JSON document. Callbacks are never stored.
"""

from .state_store import StateStore

__all__ = ["StateStore"]
