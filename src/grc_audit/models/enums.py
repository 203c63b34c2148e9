"""Enumerations for the GRC Audit Workpapers system."""

from enum import Enum


class ClauseKind(Enum):
    """Nature of a compliance clause."""
    ORGANIZATIONAL = "organizational"
    TECHNICAL = "technical"


class CategoryGroup(Enum):
    """Groups that template categories are organised into."""
    MAIN_CLAUSES = "main-clauses"
    ANNEX_A_CONTROLS = "annex-a-controls"

    @property
    def display_name(self) -> str:
        if self is CategoryGroup.MAIN_CLAUSES:
            return "Main Clauses"
        return "Annex A Controls"


class AuditStatus(Enum):
    """Lifecycle states of an audit plan."""
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    UNDER_REVIEW = "under-review"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TestResult(Enum):
    """Outcome recorded on a workpaper once testing is performed."""
    __test__ = False  # not a pytest test class

    CONFORMITY = "conformity"
    PARTIAL_CONFORMITY = "partial-conformity"
    NON_CONFORMITY = "non-conformity"


class FindingSeverity(Enum):
    """Severity of a finding, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER[self]


_SEVERITY_ORDER = {
    FindingSeverity.CRITICAL: 0,
    FindingSeverity.HIGH: 1,
    FindingSeverity.MEDIUM: 2,
    FindingSeverity.LOW: 3,
}


class FindingStatus(Enum):
    """Lifecycle states of a finding."""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
