"""Submit-for-review workflow.

Submitting an audit plan turns its category selection into workpaper drafts,
one per selected category, and moves the plan to ``under-review``. Either
every workpaper is created and the status changes, or nothing is written.
"""

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..models.audit import Workpaper
from ..models.catalog import TemplateCategory
from ..models.enums import AuditStatus
from ..services.template_service import TemplateService, get_category_clause_display
from ..storage.audit_logger import AuditLogger
from ..storage.database import DatabaseManager
from ..storage.repositories import AuditPlanRepository, WorkpaperRepository
from .results import SubmissionResult


logger = logging.getLogger(__name__)

SUBMITTABLE_STATUSES = (AuditStatus.PLANNED, AuditStatus.IN_PROGRESS)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
PLAN_NOT_FOUND_MESSAGE = "Audit plan not found"


class ReviewSubmissionService:
    """
    Generates workpapers from an audit plan's selection and submits the plan
    for review.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        template_service: Optional[TemplateService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the submission service.

        Args:
            db_manager: Database manager providing the transaction.
            template_service: Template service used to validate the
                              selection and resolve categories.
            audit_logger: Optional audit trail to record the submission in.
        """
        self._db_manager = db_manager
        self._templates = template_service or TemplateService()
        self._audit_logger = audit_logger
        self._plans = AuditPlanRepository(db_manager)
        self._workpapers = WorkpaperRepository(db_manager)

    def submit(self, audit_plan_id: str, prepared_by: Optional[str] = None) -> SubmissionResult:
        """
        Submit an audit plan for review.

        Args:
            audit_plan_id: Plan to submit.
            prepared_by: Author recorded on the workpapers. Defaults to the
                         plan's team leader.

        Returns:
            SubmissionResult. On success it carries the created workpapers in
            template category order. Failures never leave partial writes.
        """
        try:
            with self._db_manager.get_session() as session:
                result = self._submit_in_session(session, audit_plan_id, prepared_by)
        except Exception:
            logger.exception(f"Submitting audit plan {audit_plan_id} for review failed")
            return SubmissionResult(success=False, message=UNEXPECTED_ERROR_MESSAGE)

        if result.success:
            logger.info(
                f"Audit plan {audit_plan_id} submitted for review with "
                f"{len(result.workpapers)} workpapers"
            )
            self._record_submission(audit_plan_id, result, prepared_by)
        else:
            logger.warning(f"Audit plan {audit_plan_id} not submitted: {result.message}")

        return result

    def _submit_in_session(
        self,
        session: Session,
        audit_plan_id: str,
        prepared_by: Optional[str],
    ) -> SubmissionResult:
        plans = self._plans.bind(session)
        workpapers = self._workpapers.bind(session)

        plan = plans.get(audit_plan_id)
        if plan is None:
            return SubmissionResult(success=False, message=PLAN_NOT_FOUND_MESSAGE)

        if plan.status not in SUBMITTABLE_STATUSES:
            return SubmissionResult(
                success=False,
                message=f"Audit plan cannot be submitted for review from status '{plan.status.value}'",
            )

        validation = self._templates.validate_category_selection(
            plan.template_id, plan.selected_categories
        )
        if not validation.valid:
            return SubmissionResult(
                success=False,
                message="Category selection is invalid",
                errors=validation.errors,
            )

        author = prepared_by or plan.team_leader
        today = date.today()
        categories = self._templates.get_categories_by_ids(plan.template_id, plan.selected_categories)

        created = [
            workpapers.create(self._draft_workpaper(audit_plan_id, category, author, today))
            for category in categories
        ]
        plans.update(audit_plan_id, status=AuditStatus.UNDER_REVIEW)

        return SubmissionResult(
            success=True,
            message=f"Audit plan submitted for review. {len(created)} workpapers created.",
            workpapers=created,
        )

    @staticmethod
    def _draft_workpaper(
        audit_plan_id: str,
        category: TemplateCategory,
        prepared_by: str,
        prepared_date: date,
    ) -> Workpaper:
        return Workpaper(
            id=str(uuid.uuid4()),
            audit_id=audit_plan_id,
            category_id=category.id,
            clause=get_category_clause_display(category),
            clause_title=category.name,
            objectives=category.objectives,
            scope=category.scope,
            test_procedures=category.audit_procedure,
            test_results="",
            test_result=None,
            prepared_by=prepared_by,
            prepared_date=prepared_date,
        )

    def _record_submission(
        self,
        audit_plan_id: str,
        result: SubmissionResult,
        user_id: Optional[str],
    ) -> None:
        if self._audit_logger is None:
            return
        for workpaper in result.workpapers:
            self._audit_logger.log_workpaper_created(
                audit_plan_id, workpaper.id, workpaper.category_id, workpaper.clause, user_id=user_id
            )
        self._audit_logger.log_submitted_for_review(
            audit_plan_id, [w.id for w in result.workpapers], user_id=user_id
        )
