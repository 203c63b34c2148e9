"""Result objects returned by workflow actions."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ..models.audit import Workpaper

T = TypeVar("T")


@dataclass
class ActionResult(Generic[T]):
    """
    Outcome of a user action.

    Rejected input is reported here with ``success`` false and the reasons
    in ``errors``; nothing was written in that case.
    """
    success: bool
    message: str
    errors: List[str] = field(default_factory=list)
    data: Optional[T] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        return {
            "success": self.success,
            "message": self.message,
            "errors": list(self.errors),
            "data": payload,
        }


@dataclass
class SubmissionResult:
    """Outcome of submitting an audit plan for review."""
    success: bool
    message: str
    errors: List[str] = field(default_factory=list)
    workpapers: List[Workpaper] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "errors": list(self.errors),
            "workpapers": [w.to_dict() for w in self.workpapers],
        }
