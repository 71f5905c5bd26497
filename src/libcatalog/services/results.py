"""
Result types returned by the mutation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..core.entities import Entity, EntityKind
from ..validation.errors import FieldError


@dataclass
class Rejected:
    """
    At least one field rule failed. ``candidate`` holds the normalized input
    so it can be redisplayed; ``errors`` holds every failure in rule order.
    """

    candidate: Entity
    errors: List[FieldError]
    status: str = field(default="rejected", init=False)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "candidate": self.candidate.to_dict(),
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class Committed:
    """
    The entity is persisted. ``deduplicated`` marks a Genre create that
    resolved to an already stored Genre without writing anything.
    """

    kind: EntityKind
    identity: str
    reference: str
    created: bool = False
    deduplicated: bool = False
    entity: Optional[Entity] = None
    status: str = field(default="committed", init=False)

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "reference": self.reference, "identity": self.identity}


@dataclass
class Failed:
    reason: str
    status: str = field(default="failed", init=False)

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "reason": self.reason}


PipelineResult = Union[Rejected, Committed, Failed]


@dataclass
class DeletionCheck:
    entity: Entity
    blocking_dependents: List[Entity] = field(default_factory=list)

    @property
    def deletable(self) -> bool:
        return not self.blocking_dependents

    def as_dict(self) -> Dict[str, Any]:
        return {
            "deletable": self.deletable,
            "blockingDependents": [dependent.to_dict() for dependent in self.blocking_dependents],
        }


@dataclass
class DeleteResult:
    ok: bool
    reason: Optional[str] = None
