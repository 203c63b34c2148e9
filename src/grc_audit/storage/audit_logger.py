"""Audit trail implementation backed by the ``audit_events`` table."""

import csv
import io
import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select

from ..interfaces.audit import AuditEvent, AuditEventType, IAuditLogger
from .database import DatabaseManager
from .models import AuditEventModel


logger = logging.getLogger(__name__)


class AuditLogger(IAuditLogger):
    """
    Audit trail with a relational database backend.

    Records audit plan, workpaper and finding events for traceability,
    supports querying and exporting them per audit plan.
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        database_url: Optional[str] = None,
    ):
        """
        Initialize the audit logger.

        Args:
            db_manager: Optional DatabaseManager instance. If not provided,
                       a new one will be created.
            database_url: Database URL for creating a new DatabaseManager.
        """
        if db_manager is not None:
            self._db_manager = db_manager
            self._owns_db_manager = False
        else:
            self._db_manager = DatabaseManager(database_url=database_url)
            self._owns_db_manager = True

    def _to_model(self, event: AuditEvent) -> AuditEventModel:
        """Convert AuditEvent dataclass to SQLAlchemy model."""
        return AuditEventModel(
            id=event.id,
            event_type=event.event_type.value if isinstance(event.event_type, AuditEventType) else event.event_type,
            timestamp=event.timestamp,
            audit_plan_id=event.audit_plan_id,
            entity_id=event.entity_id,
            user_id=event.user_id,
            details=event.details or {},
        )

    def _from_model(self, model: AuditEventModel) -> AuditEvent:
        """Convert SQLAlchemy model to AuditEvent dataclass."""
        return AuditEvent(
            id=model.id,
            event_type=AuditEventType(model.event_type),
            timestamp=model.timestamp,
            audit_plan_id=model.audit_plan_id,
            entity_id=model.entity_id,
            user_id=model.user_id,
            details=model.details or {},
        )

    def log_event(self, event: AuditEvent) -> None:
        """
        Record an audit event to the database.

        Args:
            event: The audit event to record.
        """
        model = self._to_model(event)
        with self._db_manager.get_session() as session:
            session.add(model)
        logger.debug(f"Recorded {model.event_type} for audit plan {event.audit_plan_id}")

    def get_events(
        self,
        audit_plan_id: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        entity_id: Optional[str] = None,
    ) -> List[AuditEvent]:
        """
        Query audit events with optional filters.

        Args:
            audit_plan_id: Filter by audit plan ID.
            event_type: Filter by event type.
            start_time: Filter events after this time.
            end_time: Filter events before this time.
            entity_id: Filter by the workpaper or finding the event touched.

        Returns:
            List of matching audit events, newest first.
        """
        with self._db_manager.get_session() as session:
            query = select(AuditEventModel)

            conditions = []
            if audit_plan_id:
                conditions.append(AuditEventModel.audit_plan_id == audit_plan_id)
            if event_type:
                event_type_value = event_type.value if isinstance(event_type, AuditEventType) else event_type
                conditions.append(AuditEventModel.event_type == event_type_value)
            if start_time:
                conditions.append(AuditEventModel.timestamp >= start_time)
            if end_time:
                conditions.append(AuditEventModel.timestamp <= end_time)
            if entity_id:
                conditions.append(AuditEventModel.entity_id == entity_id)

            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(AuditEventModel.timestamp.desc())

            result = session.execute(query)
            models = result.scalars().all()

            return [self._from_model(m) for m in models]

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
        if format not in ("json", "csv"):
            raise ValueError(f"Unsupported export format: {format}. Use 'json' or 'csv'.")

        events = self.get_events(audit_plan_id=audit_plan_id)

        if format == "json":
            return self._export_json(audit_plan_id, events)
        else:
            return self._export_csv(events)

    @staticmethod
    def _event_type_value(event: AuditEvent) -> str:
        return event.event_type.value if isinstance(event.event_type, AuditEventType) else event.event_type

    def _export_json(self, audit_plan_id: str, events: List[AuditEvent]) -> str:
        """Export events to JSON with per-type counts."""
        counts: Dict[str, int] = {}
        for e in events:
            key = self._event_type_value(e)
            counts[key] = counts.get(key, 0) + 1

        data = {
            "export_timestamp": datetime.utcnow().isoformat(),
            "audit_plan_id": audit_plan_id,
            "event_count": len(events),
            "event_counts": counts,
            "events": [
                {
                    "id": e.id,
                    "event_type": self._event_type_value(e),
                    "timestamp": e.timestamp.isoformat() if e.timestamp else None,
                    "audit_plan_id": e.audit_plan_id,
                    "entity_id": e.entity_id,
                    "user_id": e.user_id,
                    "details": e.details,
                }
                for e in events
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _export_csv(self, events: List[AuditEvent]) -> str:
        """Export events to CSV format."""
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow([
            "id", "event_type", "timestamp", "audit_plan_id",
            "entity_id", "user_id", "details"
        ])

        for e in events:
            writer.writerow([
                e.id,
                self._event_type_value(e),
                e.timestamp.isoformat() if e.timestamp else "",
                e.audit_plan_id or "",
                e.entity_id or "",
                e.user_id or "",
                json.dumps(e.details, ensure_ascii=False),
            ])

        return output.getvalue()

    # ========== Convenience Logging Methods ==========

    def _record(
        self,
        event_type: AuditEventType,
        audit_plan_id: Optional[str],
        entity_id: Optional[str],
        user_id: Optional[str],
        details: Dict[str, Any],
    ) -> None:
        self.log_event(AuditEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            timestamp=datetime.utcnow(),
            audit_plan_id=audit_plan_id,
            entity_id=entity_id,
            user_id=user_id,
            details=details,
        ))

    def log_audit_plan_created(
        self,
        audit_plan_id: str,
        title: str,
        template_id: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log creation of an audit plan."""
        self._record(
            AuditEventType.AUDIT_PLAN_CREATED, audit_plan_id, audit_plan_id, user_id,
            {"title": title, "template_id": template_id},
        )

    def log_selection_updated(
        self,
        audit_plan_id: str,
        selected_categories: List[str],
        user_id: Optional[str] = None,
    ) -> None:
        """Log a change to an audit plan's category selection."""
        self._record(
            AuditEventType.SELECTION_UPDATED, audit_plan_id, audit_plan_id, user_id,
            {"selected_categories": list(selected_categories), "count": len(selected_categories)},
        )

    def log_submitted_for_review(
        self,
        audit_plan_id: str,
        workpaper_ids: List[str],
        user_id: Optional[str] = None,
    ) -> None:
        """Log a successful submit-for-review of an audit plan."""
        self._record(
            AuditEventType.SUBMITTED_FOR_REVIEW, audit_plan_id, audit_plan_id, user_id,
            {"workpaper_ids": list(workpaper_ids), "workpaper_count": len(workpaper_ids)},
        )

    def log_workpaper_created(
        self,
        audit_plan_id: str,
        workpaper_id: str,
        category_id: Optional[str],
        clause: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log creation of a workpaper."""
        self._record(
            AuditEventType.WORKPAPER_CREATED, audit_plan_id, workpaper_id, user_id,
            {"category_id": category_id, "clause": clause},
        )

    def log_workpaper_tested(
        self,
        audit_plan_id: str,
        workpaper_id: str,
        test_result: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a test result recorded on a workpaper."""
        self._record(
            AuditEventType.WORKPAPER_TESTED, audit_plan_id, workpaper_id, user_id,
            {"test_result": test_result},
        )

    def log_workpaper_reviewed(
        self,
        audit_plan_id: str,
        workpaper_id: str,
        reviewed_by: str,
    ) -> None:
        """Log the review sign-off of a workpaper."""
        self._record(
            AuditEventType.WORKPAPER_REVIEWED, audit_plan_id, workpaper_id, reviewed_by,
            {"reviewed_by": reviewed_by},
        )

    def log_finding_created(
        self,
        audit_plan_id: str,
        finding_id: str,
        reference_code: str,
        severity: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log creation of a finding."""
        self._record(
            AuditEventType.FINDING_CREATED, audit_plan_id, finding_id, user_id,
            {"reference_code": reference_code, "severity": severity},
        )

    def log_finding_status_changed(
        self,
        audit_plan_id: str,
        finding_id: str,
        from_status: str,
        to_status: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a finding status transition."""
        self._record(
            AuditEventType.FINDING_STATUS_CHANGED, audit_plan_id, finding_id, user_id,
            {"from_status": from_status, "to_status": to_status},
        )

    def close(self) -> None:
        """Close the audit logger and release resources."""
        if self._owns_db_manager:
            self._db_manager.close()
