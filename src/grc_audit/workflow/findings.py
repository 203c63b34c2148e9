"""Findings workflow: creation, status lifecycle and timeline."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, List, Optional, Union

from ..catalog.clauses import DEFAULT_CLAUSE_CATALOG, ClauseCatalog
from ..exceptions import EntityNotFoundError, InvalidTransitionError
from ..models.audit import Finding, FindingTimelineEvent
from ..models.enums import FindingSeverity, FindingStatus
from ..services.analytics import REFERENCE_CODE_PREFIX, next_finding_reference_code, validate_finding
from ..storage.audit_logger import AuditLogger
from ..storage.database import DatabaseManager
from ..storage.repositories import AuditPlanRepository, FindingEventRepository, FindingRepository
from .results import ActionResult


logger = logging.getLogger(__name__)

FINDING_TRANSITIONS: Dict[FindingStatus, FrozenSet[FindingStatus]] = {
    FindingStatus.OPEN: frozenset({FindingStatus.IN_PROGRESS, FindingStatus.RESOLVED}),
    FindingStatus.IN_PROGRESS: frozenset({FindingStatus.RESOLVED, FindingStatus.OPEN}),
    FindingStatus.RESOLVED: frozenset({FindingStatus.CLOSED, FindingStatus.IN_PROGRESS}),
    FindingStatus.CLOSED: frozenset(),
}

UPDATABLE_FIELDS = ("assigned_to", "due_date", "corrective_action", "recommendation", "description")


def can_transition(current: FindingStatus, requested: FindingStatus) -> bool:
    return requested in FINDING_TRANSITIONS[current]


@dataclass
class FindingInput:
    """Fields supplied when raising a finding."""
    audit_id: str
    clause: str
    description: str
    severity: Union[FindingSeverity, str, None]
    recommendation: str
    clause_title: Optional[str] = None
    workpaper_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[date] = None
    corrective_action: Optional[str] = None
    created_by: str = "System"


class FindingService:
    """
    Raises findings against an audit plan and moves them through their
    lifecycle, keeping a timeline of what happened to each.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        clause_catalog: ClauseCatalog = DEFAULT_CLAUSE_CATALOG,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db_manager = db_manager
        self._clauses = clause_catalog
        self._audit_logger = audit_logger
        self._plans = AuditPlanRepository(db_manager)
        self._findings = FindingRepository(db_manager)
        self._events = FindingEventRepository(db_manager)

    @staticmethod
    def _parse_severity(value: Union[FindingSeverity, str, None]) -> Optional[FindingSeverity]:
        if isinstance(value, FindingSeverity):
            return value
        try:
            return FindingSeverity(value)
        except ValueError:
            return None

    def create_finding(self, data: FindingInput) -> ActionResult[Finding]:
        """
        Validate and store a new finding with status ``open``.

        The finding receives the next ``FND-<year>-<NNN>`` reference code of
        the current year and a ``created`` timeline event.
        """
        validation = validate_finding({
            "description": data.description,
            "recommendation": data.recommendation,
            "clause": data.clause,
            "severity": data.severity,
        })
        errors = list(validation.errors)

        severity = self._parse_severity(data.severity) if data.severity else None
        if data.severity and severity is None:
            errors.append(f"Invalid severity: {data.severity}")

        if errors:
            return ActionResult(success=False, message="Finding is invalid", errors=errors)

        now = datetime.utcnow()
        with self._db_manager.get_session() as session:
            if self._plans.bind(session).get(data.audit_id) is None:
                return ActionResult(
                    success=False,
                    message="Finding is invalid",
                    errors=["Audit plan not found"],
                )

            findings = self._findings.bind(session)
            prefix = f"{REFERENCE_CODE_PREFIX}-{now.year}-"
            reference_code = next_finding_reference_code(
                findings.get_reference_codes(prefix), now.year
            )

            clause = data.clause.strip()
            finding = findings.create(Finding(
                id=str(uuid.uuid4()),
                reference_code=reference_code,
                audit_id=data.audit_id,
                workpaper_id=data.workpaper_id,
                clause=clause,
                clause_title=data.clause_title or self._clauses.get_clause_title(clause),
                description=data.description.strip(),
                severity=severity,
                recommendation=data.recommendation.strip(),
                corrective_action=data.corrective_action,
                assigned_to=data.assigned_to,
                due_date=data.due_date,
                created_at=now,
                updated_at=now,
            ))
            self._events.bind(session).create(FindingTimelineEvent(
                id=str(uuid.uuid4()),
                finding_id=finding.id,
                event_type="created",
                description="Finding created",
                user=data.created_by,
                timestamp=now,
            ))

        logger.info(f"Created finding {finding.reference_code} ({finding.severity.value}) for audit {finding.audit_id}")

        if self._audit_logger is not None:
            self._audit_logger.log_finding_created(
                finding.audit_id, finding.id, finding.reference_code,
                finding.severity.value, user_id=data.created_by,
            )

        return ActionResult(success=True, message="Finding created successfully", data=finding)

    def change_status(
        self,
        finding_id: str,
        new_status: Union[FindingStatus, str],
        user: str,
    ) -> Finding:
        """
        Move a finding to a new status.

        Resolving stamps today's date as the resolution date; reopening a
        resolved finding clears it.

        Raises:
            EntityNotFoundError: If the finding does not exist.
            InvalidTransitionError: If the lifecycle does not allow the move.
        """
        requested = new_status if isinstance(new_status, FindingStatus) else FindingStatus(new_status)

        with self._db_manager.get_session() as session:
            findings = self._findings.bind(session)
            finding = findings.get(finding_id)
            if finding is None:
                raise EntityNotFoundError("Finding", finding_id)

            current = finding.status
            if not can_transition(current, requested):
                raise InvalidTransitionError("finding", current.value, requested.value)

            changes: Dict[str, Any] = {"status": requested}
            if requested is FindingStatus.RESOLVED:
                changes["resolved_date"] = date.today()
            elif current is FindingStatus.RESOLVED and requested is FindingStatus.IN_PROGRESS:
                changes["resolved_date"] = None

            finding = findings.update(finding_id, **changes)
            self._events.bind(session).create(FindingTimelineEvent(
                id=str(uuid.uuid4()),
                finding_id=finding_id,
                event_type="status_change",
                description=f"Status changed from {current.value} to {requested.value}",
                user=user,
                timestamp=datetime.utcnow(),
            ))

        logger.info(f"Finding {finding.reference_code} moved from {current.value} to {requested.value}")

        if self._audit_logger is not None:
            self._audit_logger.log_finding_status_changed(
                finding.audit_id, finding_id, current.value, requested.value, user_id=user
            )

        return finding

    def update_finding(self, finding_id: str, user: str, **changes: Any) -> Finding:
        """
        Edit a finding's descriptive fields.

        Status is changed only through ``change_status``.

        Raises:
            EntityNotFoundError: If the finding does not exist.
            ValueError: If a field outside the editable set is given.
        """
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(unknown)}")

        with self._db_manager.get_session() as session:
            finding = self._findings.bind(session).update(finding_id, **changes)
            if changes:
                self._events.bind(session).create(FindingTimelineEvent(
                    id=str(uuid.uuid4()),
                    finding_id=finding_id,
                    event_type="updated",
                    description=f"Updated {', '.join(sorted(changes))}",
                    user=user,
                    timestamp=datetime.utcnow(),
                ))

        return finding

    def get_finding(self, finding_id: str) -> Optional[Finding]:
        return self._findings.get(finding_id)

    def list_findings(self, **filters: Any) -> List[Finding]:
        return self._findings.list(**filters)

    def get_timeline(self, finding_id: str) -> List[FindingTimelineEvent]:
        """Timeline events of a finding, oldest first; ``[]`` if unknown."""
        return self._events.list(finding_id=finding_id)
