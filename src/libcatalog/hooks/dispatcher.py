"""
Hook dispatcher coordinating mutation lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from ..core.entities import Entity, EntityKind


HookHandler = Callable[..., None]

BEFORE_COMMIT = "before_commit"
AFTER_COMMIT = "after_commit"
AFTER_REJECT = "after_reject"
AFTER_DELETE = "after_delete"

EVENTS = (BEFORE_COMMIT, AFTER_COMMIT, AFTER_REJECT, AFTER_DELETE)


class HookDispatcher:
    """
    Maintains global and per-kind hook handlers.

    Handlers are called as ``handler(entity, **context)`` in registration
    order, global handlers first. Exceptions propagate to the caller.
    """

    def __init__(self) -> None:
        self._global_handlers: Dict[str, List[HookHandler]] = defaultdict(list)
        self._kind_handlers: Dict[EntityKind, Dict[str, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def register(
        self, event: str, handler: HookHandler, *, kind: Optional[EntityKind | str] = None
    ) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown hook event '{event}'")
        if kind is not None:
            self._kind_handlers[EntityKind(kind)][event].append(handler)
        else:
            self._global_handlers[event].append(handler)

    def fire(self, event: str, entity: Optional[Entity], **context: Any) -> None:
        handlers = list(self._global_handlers.get(event, []))
        kind = context.get("kind") or (entity.kind if entity is not None else None)
        if kind is not None:
            handlers.extend(self._kind_handlers.get(EntityKind(kind), {}).get(event, []))
        for handler in handlers:
            handler(entity, **context)

    def clear(self) -> None:
        self._global_handlers.clear()
        self._kind_handlers.clear()


hooks = HookDispatcher()
