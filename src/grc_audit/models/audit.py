"""Audit plan, workpaper and finding data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .enums import AuditStatus, FindingSeverity, FindingStatus, TestResult


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class AuditPlan:
    """
    An audit engagement against a compliance standard.

    The plan references a workpaper template and carries the category
    selection the user made for it. Submitting the plan for review turns
    that selection into workpapers.
    """
    id: str
    title: str
    template_id: str
    objectives: str
    team_leader: str
    start_date: date
    end_date: date
    standard: str = "ISO 27001:2022"
    scope: List[str] = field(default_factory=list)
    team_members: List[str] = field(default_factory=list)
    status: AuditStatus = AuditStatus.PLANNED
    progress: int = 0
    selected_categories: List[str] = field(default_factory=list)
    conformity_rate: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "standard": self.standard,
            "templateId": self.template_id,
            "scope": list(self.scope),
            "objectives": self.objectives,
            "teamLeader": self.team_leader,
            "teamMembers": list(self.team_members),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "status": self.status.value,
            "progress": self.progress,
            "selectedCategories": list(self.selected_categories),
            "conformityRate": self.conformity_rate,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class Workpaper:
    """
    Audit deliverable documenting one template category.

    ``test_result`` stays ``None`` until testing has been performed.
    """
    id: str
    audit_id: str
    clause: str
    clause_title: str
    objectives: str
    test_procedures: str
    prepared_by: str
    prepared_date: date
    category_id: Optional[str] = None
    scope: str = ""
    test_results: str = ""
    test_result: Optional[TestResult] = None
    reviewed_by: Optional[str] = None
    reviewed_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "auditId": self.audit_id,
            "categoryId": self.category_id,
            "clause": self.clause,
            "clauseTitle": self.clause_title,
            "objectives": self.objectives,
            "scope": self.scope,
            "testProcedures": self.test_procedures,
            "testResults": self.test_results,
            "testResult": self.test_result.value if self.test_result else None,
            "preparedBy": self.prepared_by,
            "preparedDate": _iso(self.prepared_date),
            "reviewedBy": self.reviewed_by,
            "reviewedDate": _iso(self.reviewed_date),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class Finding:
    """A non-conformity or observation raised during audit testing."""
    id: str
    reference_code: str
    audit_id: str
    clause: str
    clause_title: str
    description: str
    severity: FindingSeverity
    recommendation: str
    status: FindingStatus = FindingStatus.OPEN
    corrective_action: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    resolved_date: Optional[date] = None
    workpaper_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "referenceCode": self.reference_code,
            "auditId": self.audit_id,
            "workpaperId": self.workpaper_id,
            "clause": self.clause,
            "clauseTitle": self.clause_title,
            "description": self.description,
            "severity": self.severity.value,
            "status": self.status.value,
            "recommendation": self.recommendation,
            "correctiveAction": self.corrective_action,
            "assignedTo": self.assigned_to,
            "dueDate": _iso(self.due_date),
            "resolvedDate": _iso(self.resolved_date),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class FindingTimelineEvent:
    """Entry in a finding's lifecycle history."""
    id: str
    finding_id: str
    event_type: str  # "created", "status_change", "updated"
    description: str
    user: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "findingId": self.finding_id,
            "type": self.event_type,
            "description": self.description,
            "user": self.user,
            "timestamp": _iso(self.timestamp),
        }
