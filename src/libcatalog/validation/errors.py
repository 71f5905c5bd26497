"""
Validation error hierarchy for LibCatalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..errors import CatalogError


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationError(CatalogError):
    """
    Aggregated validation error keeping every failure in validation order.
    """

    def __init__(self, errors: Iterable[FieldError], *, candidate: Optional[Any] = None) -> None:
        self.errors: List[FieldError] = list(errors)
        self.candidate = candidate
        super().__init__(self._format_message())

    def as_dict(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped

    def _format_message(self) -> str:
        segments = []
        for field, messages in self.as_dict().items():
            prefix = field if field != "__all__" else "non-field"
            combined = "; ".join(messages)
            segments.append(f"{prefix}: {combined}")
        return "; ".join(segments)
