"""SQLAlchemy-backed repositories for audit plans, workpapers and findings.

Each repository either opens its own transactional session per call or, when
bound to a caller's session, joins that session's transaction so several
writes can commit or roll back together:

    with db_manager.get_session() as session:
        plans = AuditPlanRepository(db_manager, session=session)
        workpapers = WorkpaperRepository(db_manager, session=session)
        ...
"""

from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generator, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from ..exceptions import EntityNotFoundError
from ..interfaces.repository import IRepository
from ..models.audit import AuditPlan, Finding, FindingTimelineEvent, Workpaper
from ..models.enums import AuditStatus, FindingSeverity, FindingStatus, TestResult
from .database import DatabaseManager
from .models import AuditPlanModel, Base, FindingEventModel, FindingModel, WorkpaperModel

T = TypeVar("T")


def _enum_values(values: Optional[Iterable[Any]]) -> List[str]:
    return [v.value if isinstance(v, Enum) else v for v in values or []]


class SqlAlchemyRepository(IRepository[T], Generic[T]):
    """
    Common get/create/update/delete over one table.

    Domain attribute names match column attribute names except where a
    subclass lists a rename in ``_column_names``.
    """

    entity_type: str = "Entity"
    model_class: Type[Base]
    _column_names: Dict[str, str] = {}

    def __init__(self, db_manager: DatabaseManager, session: Optional[Session] = None):
        """
        Initialize the repository.

        Args:
            db_manager: Database manager that provides sessions.
            session: Optional caller-owned session. When given, the repository
                     flushes but never commits; the caller's transaction does.
        """
        self._db_manager = db_manager
        self._session = session

    def bind(self, session: Session) -> "SqlAlchemyRepository[T]":
        """Same repository, joined to ``session``'s transaction."""
        return type(self)(self._db_manager, session=session)

    @contextmanager
    def _session_scope(self) -> Generator[Session, None, None]:
        if self._session is not None:
            yield self._session
        else:
            with self._db_manager.get_session() as session:
                yield session

    def _to_model(self, entity: T) -> Base:
        raise NotImplementedError

    def _from_model(self, model: Any) -> T:
        raise NotImplementedError

    def _load(self, session: Session, entity_id: str) -> Any:
        model = session.get(self.model_class, entity_id)
        if model is None:
            raise EntityNotFoundError(self.entity_type, entity_id)
        return model

    def get(self, entity_id: str) -> Optional[T]:
        with self._session_scope() as session:
            model = session.get(self.model_class, entity_id)
            return self._from_model(model) if model is not None else None

    def create(self, entity: T) -> T:
        with self._session_scope() as session:
            model = self._to_model(entity)
            session.add(model)
            session.flush()
            return self._from_model(model)

    def update(self, entity_id: str, **changes: Any) -> T:
        with self._session_scope() as session:
            model = self._load(session, entity_id)
            for name, value in changes.items():
                column = self._column_names.get(name, name)
                if not hasattr(model, column):
                    raise ValueError(f"Unknown field for {self.entity_type}: {name}")
                setattr(model, column, value.value if isinstance(value, Enum) else value)
            if hasattr(model, "updated_at"):
                model.updated_at = datetime.utcnow()
            session.flush()
            return self._from_model(model)

    def delete(self, entity_id: str) -> None:
        with self._session_scope() as session:
            model = self._load(session, entity_id)
            session.delete(model)
            session.flush()


class AuditPlanRepository(SqlAlchemyRepository[AuditPlan]):
    """Audit plans."""

    entity_type = "Audit plan"
    model_class = AuditPlanModel

    def _to_model(self, plan: AuditPlan) -> AuditPlanModel:
        now = datetime.utcnow()
        return AuditPlanModel(
            id=plan.id,
            title=plan.title,
            standard=plan.standard,
            template_id=plan.template_id,
            scope=list(plan.scope),
            objectives=plan.objectives,
            team_leader=plan.team_leader,
            team_members=list(plan.team_members),
            start_date=plan.start_date,
            end_date=plan.end_date,
            status=plan.status.value,
            progress=plan.progress,
            selected_categories=list(plan.selected_categories),
            conformity_rate=plan.conformity_rate,
            created_at=plan.created_at or now,
            updated_at=plan.updated_at or now,
        )

    def _from_model(self, model: AuditPlanModel) -> AuditPlan:
        return AuditPlan(
            id=model.id,
            title=model.title,
            standard=model.standard,
            template_id=model.template_id,
            scope=list(model.scope or []),
            objectives=model.objectives,
            team_leader=model.team_leader,
            team_members=list(model.team_members or []),
            start_date=model.start_date,
            end_date=model.end_date,
            status=AuditStatus(model.status),
            progress=model.progress,
            selected_categories=list(model.selected_categories or []),
            conformity_rate=model.conformity_rate,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def list(
        self,
        status: Optional[Iterable[AuditStatus]] = None,
        search: Optional[str] = None,
        team_leader: Optional[str] = None,
        date_range: Optional[Tuple[date, date]] = None,
        template_id: Optional[str] = None,
    ) -> List[AuditPlan]:
        """
        List audit plans, most recent start date first.

        Args:
            status: Keep plans in any of these statuses.
            search: Case-insensitive text matched against title, objectives,
                    team leader and standard.
            team_leader: Exact team leader.
            date_range: ``(start, end)``; keep plans whose period overlaps it.
            template_id: Keep plans using this template.
        """
        with self._session_scope() as session:
            query = select(AuditPlanModel)

            conditions = []
            statuses = _enum_values(status)
            if statuses:
                conditions.append(AuditPlanModel.status.in_(statuses))
            if search and search.strip():
                pattern = f"%{search.strip().lower()}%"
                conditions.append(or_(
                    func.lower(AuditPlanModel.title).like(pattern),
                    func.lower(AuditPlanModel.objectives).like(pattern),
                    func.lower(AuditPlanModel.team_leader).like(pattern),
                    func.lower(AuditPlanModel.standard).like(pattern),
                ))
            if team_leader:
                conditions.append(AuditPlanModel.team_leader == team_leader)
            if date_range:
                range_start, range_end = date_range
                conditions.append(AuditPlanModel.start_date <= range_end)
                conditions.append(AuditPlanModel.end_date >= range_start)
            if template_id:
                conditions.append(AuditPlanModel.template_id == template_id)

            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(AuditPlanModel.start_date.desc())

            models = session.execute(query).scalars().all()
            return [self._from_model(m) for m in models]


class WorkpaperRepository(SqlAlchemyRepository[Workpaper]):
    """Workpapers, listed per audit in creation order."""

    entity_type = "Workpaper"
    model_class = WorkpaperModel

    def _to_model(self, workpaper: Workpaper) -> WorkpaperModel:
        now = datetime.utcnow()
        return WorkpaperModel(
            id=workpaper.id,
            audit_id=workpaper.audit_id,
            category_id=workpaper.category_id,
            clause=workpaper.clause,
            clause_title=workpaper.clause_title,
            objectives=workpaper.objectives,
            scope=workpaper.scope,
            test_procedures=workpaper.test_procedures,
            test_results=workpaper.test_results,
            test_result=workpaper.test_result.value if workpaper.test_result else None,
            prepared_by=workpaper.prepared_by,
            prepared_date=workpaper.prepared_date,
            reviewed_by=workpaper.reviewed_by,
            reviewed_date=workpaper.reviewed_date,
            created_at=workpaper.created_at or now,
            updated_at=workpaper.updated_at or now,
        )

    def _from_model(self, model: WorkpaperModel) -> Workpaper:
        return Workpaper(
            id=model.id,
            audit_id=model.audit_id,
            category_id=model.category_id,
            clause=model.clause,
            clause_title=model.clause_title,
            objectives=model.objectives,
            scope=model.scope or "",
            test_procedures=model.test_procedures,
            test_results=model.test_results or "",
            test_result=TestResult(model.test_result) if model.test_result else None,
            prepared_by=model.prepared_by,
            prepared_date=model.prepared_date,
            reviewed_by=model.reviewed_by,
            reviewed_date=model.reviewed_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def create(self, entity: Workpaper) -> Workpaper:
        with self._session_scope() as session:
            position = session.execute(
                select(func.count()).select_from(WorkpaperModel).where(
                    WorkpaperModel.audit_id == entity.audit_id
                )
            ).scalar()
            model = self._to_model(entity)
            model.position = position or 0
            session.add(model)
            session.flush()
            return self._from_model(model)

    def list(
        self,
        audit_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[Workpaper]:
        with self._session_scope() as session:
            query = select(WorkpaperModel)
            if audit_id:
                query = query.where(WorkpaperModel.audit_id == audit_id)
            if category_id:
                query = query.where(WorkpaperModel.category_id == category_id)
            query = query.order_by(WorkpaperModel.audit_id, WorkpaperModel.position)

            models = session.execute(query).scalars().all()
            return [self._from_model(m) for m in models]


class FindingRepository(SqlAlchemyRepository[Finding]):
    """Findings."""

    entity_type = "Finding"
    model_class = FindingModel

    def _to_model(self, finding: Finding) -> FindingModel:
        now = datetime.utcnow()
        return FindingModel(
            id=finding.id,
            reference_code=finding.reference_code,
            audit_id=finding.audit_id,
            workpaper_id=finding.workpaper_id,
            clause=finding.clause,
            clause_title=finding.clause_title,
            description=finding.description,
            severity=finding.severity.value,
            status=finding.status.value,
            recommendation=finding.recommendation,
            corrective_action=finding.corrective_action,
            assigned_to=finding.assigned_to,
            due_date=finding.due_date,
            resolved_date=finding.resolved_date,
            created_at=finding.created_at or now,
            updated_at=finding.updated_at or now,
        )

    def _from_model(self, model: FindingModel) -> Finding:
        return Finding(
            id=model.id,
            reference_code=model.reference_code,
            audit_id=model.audit_id,
            workpaper_id=model.workpaper_id,
            clause=model.clause,
            clause_title=model.clause_title,
            description=model.description,
            severity=FindingSeverity(model.severity),
            status=FindingStatus(model.status),
            recommendation=model.recommendation,
            corrective_action=model.corrective_action,
            assigned_to=model.assigned_to,
            due_date=model.due_date,
            resolved_date=model.resolved_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def list(
        self,
        audit_id: Optional[str] = None,
        severity: Optional[Iterable[FindingSeverity]] = None,
        status: Optional[Iterable[FindingStatus]] = None,
        clause: Optional[str] = None,
        assigned_to: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Finding]:
        """
        List findings ordered by reference code.

        Args:
            audit_id: Keep findings of this audit plan.
            severity: Keep findings with any of these severities.
            status: Keep findings in any of these statuses.
            clause: Exact clause number.
            assigned_to: Exact assignee.
            search: Case-insensitive text matched against reference code,
                    description, recommendation and clause title.
        """
        with self._session_scope() as session:
            query = select(FindingModel)

            conditions = []
            if audit_id:
                conditions.append(FindingModel.audit_id == audit_id)
            severities = _enum_values(severity)
            if severities:
                conditions.append(FindingModel.severity.in_(severities))
            statuses = _enum_values(status)
            if statuses:
                conditions.append(FindingModel.status.in_(statuses))
            if clause:
                conditions.append(FindingModel.clause == clause)
            if assigned_to:
                conditions.append(FindingModel.assigned_to == assigned_to)
            if search and search.strip():
                pattern = f"%{search.strip().lower()}%"
                conditions.append(or_(
                    func.lower(FindingModel.reference_code).like(pattern),
                    func.lower(FindingModel.description).like(pattern),
                    func.lower(FindingModel.recommendation).like(pattern),
                    func.lower(FindingModel.clause_title).like(pattern),
                ))

            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(FindingModel.reference_code)

            models = session.execute(query).scalars().all()
            return [self._from_model(m) for m in models]

    def get_reference_codes(self, prefix: str) -> List[str]:
        """Reference codes starting with ``prefix``."""
        with self._session_scope() as session:
            query = select(FindingModel.reference_code).where(
                FindingModel.reference_code.like(f"{prefix}%")
            )
            return list(session.execute(query).scalars().all())


class FindingEventRepository(SqlAlchemyRepository[FindingTimelineEvent]):
    """Finding timeline events, listed oldest first."""

    entity_type = "Finding event"
    model_class = FindingEventModel
    _column_names = {"user": "user_name"}

    def _to_model(self, event: FindingTimelineEvent) -> FindingEventModel:
        return FindingEventModel(
            id=event.id,
            finding_id=event.finding_id,
            event_type=event.event_type,
            description=event.description,
            user_name=event.user,
            timestamp=event.timestamp,
        )

    def _from_model(self, model: FindingEventModel) -> FindingTimelineEvent:
        return FindingTimelineEvent(
            id=model.id,
            finding_id=model.finding_id,
            event_type=model.event_type,
            description=model.description,
            user=model.user_name,
            timestamp=model.timestamp,
        )

    def list(self, finding_id: Optional[str] = None) -> List[FindingTimelineEvent]:
        with self._session_scope() as session:
            query = select(FindingEventModel)
            if finding_id:
                query = query.where(FindingEventModel.finding_id == finding_id)
            query = query.order_by(FindingEventModel.timestamp.asc())

            models = session.execute(query).scalars().all()
            return [self._from_model(m) for m in models]
