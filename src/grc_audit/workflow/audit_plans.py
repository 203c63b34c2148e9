"""Audit plan lifecycle: creation, category selection and lookups."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional

from ..exceptions import EntityNotFoundError
from ..models.audit import AuditPlan, Workpaper
from ..models.enums import AuditStatus
from ..services.analytics import validate_audit_plan
from ..services.template_service import TemplateService
from ..storage.audit_logger import AuditLogger
from ..storage.database import DatabaseManager
from ..storage.repositories import AuditPlanRepository, WorkpaperRepository
from .results import ActionResult


logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (AuditStatus.PLANNED, AuditStatus.IN_PROGRESS)


@dataclass
class AuditPlanInput:
    """Fields supplied when creating an audit plan."""
    title: str
    template_id: str
    objectives: str
    team_leader: str
    start_date: date
    end_date: date
    scope: List[str] = field(default_factory=list)
    team_members: List[str] = field(default_factory=list)
    standard: str = "ISO 27001:2022"
    selected_categories: List[str] = field(default_factory=list)
    created_by: Optional[str] = None


class AuditPlanService:
    """
    Creates audit plans and maintains their category selection.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        template_service: Optional[TemplateService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db_manager = db_manager
        self._templates = template_service or TemplateService()
        self._audit_logger = audit_logger
        self._plans = AuditPlanRepository(db_manager)
        self._workpapers = WorkpaperRepository(db_manager)

    def _unknown_ids(self, template_id: str, selected: List[str]) -> List[str]:
        known = {c.id for c in self._templates.get_template_categories(template_id)}
        return [category_id for category_id in selected if category_id not in known]

    def create_plan(self, data: AuditPlanInput) -> ActionResult[AuditPlan]:
        """
        Validate and store a new audit plan in the ``planned`` state.

        An initial category selection is optional; when given, every id must
        belong to the template. Required categories are only enforced on
        submission.
        """
        validation = validate_audit_plan({
            "title": data.title,
            "scope": data.scope,
            "objectives": data.objectives,
            "team_leader": data.team_leader,
            "start_date": data.start_date,
            "end_date": data.end_date,
        })
        errors = list(validation.errors)

        if self._templates.get_template(data.template_id) is None:
            errors.append(f"Template with ID '{data.template_id}' not found")
        else:
            invalid = self._unknown_ids(data.template_id, data.selected_categories)
            if invalid:
                errors.append(f"Invalid category IDs: {', '.join(invalid)}")

        if errors:
            return ActionResult(success=False, message="Audit plan is invalid", errors=errors)

        plan = self._plans.create(AuditPlan(
            id=str(uuid.uuid4()),
            title=data.title.strip(),
            template_id=data.template_id,
            objectives=data.objectives.strip(),
            team_leader=data.team_leader.strip(),
            start_date=data.start_date,
            end_date=data.end_date,
            standard=data.standard,
            scope=list(data.scope),
            team_members=list(data.team_members),
            selected_categories=list(dict.fromkeys(data.selected_categories)),
        ))
        logger.info(f"Created audit plan {plan.id} using template {plan.template_id}")

        if self._audit_logger is not None:
            self._audit_logger.log_audit_plan_created(
                plan.id, plan.title, plan.template_id, user_id=data.created_by
            )

        return ActionResult(success=True, message="Audit plan created successfully", data=plan)

    def update_selection(
        self,
        audit_plan_id: str,
        selected_ids: List[str],
        user_id: Optional[str] = None,
    ) -> ActionResult[AuditPlan]:
        """
        Replace an audit plan's category selection.

        Raises:
            EntityNotFoundError: If the audit plan does not exist.
        """
        plan = self._plans.get(audit_plan_id)
        if plan is None:
            raise EntityNotFoundError("Audit plan", audit_plan_id)

        if plan.status not in EDITABLE_STATUSES:
            return ActionResult(
                success=False,
                message="Selection can only be changed while the audit plan is planned or in progress",
                errors=[f"Audit plan status is '{plan.status.value}'"],
                data=plan,
            )

        invalid = self._unknown_ids(plan.template_id, selected_ids)
        if invalid:
            return ActionResult(
                success=False,
                message="Category selection is invalid",
                errors=[f"Invalid category IDs: {', '.join(invalid)}"],
                data=plan,
            )

        selection = list(dict.fromkeys(selected_ids))
        plan = self._plans.update(audit_plan_id, selected_categories=selection)
        logger.info(f"Audit plan {audit_plan_id} now has {len(selection)} selected categories")

        if self._audit_logger is not None:
            self._audit_logger.log_selection_updated(audit_plan_id, selection, user_id=user_id)

        return ActionResult(success=True, message="Selection updated successfully", data=plan)

    def get_plan(self, audit_plan_id: str) -> Optional[AuditPlan]:
        return self._plans.get(audit_plan_id)

    def list_plans(self, **filters: Any) -> List[AuditPlan]:
        return self._plans.list(**filters)

    def get_workpapers(self, audit_plan_id: str) -> List[Workpaper]:
        return self._workpapers.list(audit_id=audit_plan_id)
