"""
Lifecycle hooks registry for catalog mutations.
"""

from .dispatcher import (
    AFTER_COMMIT,
    AFTER_DELETE,
    AFTER_REJECT,
    BEFORE_COMMIT,
    EVENTS,
    HookDispatcher,
    hooks,
)

__all__ = [
    "AFTER_COMMIT",
    "AFTER_DELETE",
    "AFTER_REJECT",
    "BEFORE_COMMIT",
    "EVENTS",
    "HookDispatcher",
    "hooks",
]
