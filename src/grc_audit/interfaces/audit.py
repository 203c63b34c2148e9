"""Audit trail interface for the GRC Audit Workpapers system."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AuditEventType(Enum):
    """Types of domain events recorded in the audit trail."""
    AUDIT_PLAN_CREATED = "audit_plan_created"
    SELECTION_UPDATED = "selection_updated"
    SUBMITTED_FOR_REVIEW = "submitted_for_review"
    WORKPAPER_CREATED = "workpaper_created"
    WORKPAPER_TESTED = "workpaper_tested"
    WORKPAPER_REVIEWED = "workpaper_reviewed"
    FINDING_CREATED = "finding_created"
    FINDING_STATUS_CHANGED = "finding_status_changed"


@dataclass
class AuditEvent:
    """
    Audit trail record.

    Represents a single recorded action, the audit plan it belongs to and
    the entity it touched.
    """
    id: str
    event_type: AuditEventType
    timestamp: datetime
    audit_plan_id: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}


class IAuditLogger(ABC):
    """
    Abstract interface for the audit trail.

    Implementations of this interface handle recording and
    querying of audit events for traceability and compliance.
    """

    @abstractmethod
    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event.

        Args:
            event: The audit event to record.
        """
        pass

    @abstractmethod
    def get_events(
        self,
        audit_plan_id: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """
        Query audit events with optional filters.

        Args:
            audit_plan_id: Filter by audit plan ID.
            event_type: Filter by event type.
            start_time: Filter events after this time.
            end_time: Filter events before this time.

        Returns:
            List of matching audit events, newest first.
        """
        pass

    @abstractmethod
    def export_log(
        self,
        audit_plan_id: str,
        format: str = "json",
    ) -> str:
        """
        Export the audit trail of one audit plan.

        Args:
            audit_plan_id: The audit plan to export events for.
            format: Export format ("json" or "csv").

        Returns:
            Exported log content as a string.

        Raises:
            ValueError: If format is not supported.
        """
        pass
