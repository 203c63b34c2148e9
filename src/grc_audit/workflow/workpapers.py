"""Workpaper completion: recording test results and review sign-off."""

import logging
from datetime import date
from typing import Optional, Union

from ..exceptions import EntityNotFoundError
from ..models.audit import Workpaper
from ..models.enums import TestResult
from ..services.analytics import validate_workpaper
from ..storage.audit_logger import AuditLogger
from ..storage.database import DatabaseManager
from ..storage.repositories import WorkpaperRepository
from .results import ActionResult


logger = logging.getLogger(__name__)


class WorkpaperService:
    """
    Completes the workpaper drafts generated on submission.

    A workpaper is tested first, then reviewed. Conformity and progress
    analytics are computed from these two steps.
    """

    def __init__(self, db_manager: DatabaseManager, audit_logger: Optional[AuditLogger] = None):
        self._db_manager = db_manager
        self._audit_logger = audit_logger
        self._workpapers = WorkpaperRepository(db_manager)

    def _require(self, workpaper_id: str) -> Workpaper:
        workpaper = self._workpapers.get(workpaper_id)
        if workpaper is None:
            raise EntityNotFoundError("Workpaper", workpaper_id)
        return workpaper

    def get_workpaper(self, workpaper_id: str) -> Optional[Workpaper]:
        return self._workpapers.get(workpaper_id)

    def record_test_result(
        self,
        workpaper_id: str,
        test_result: Union[TestResult, str, None],
        test_results: str,
        user_id: Optional[str] = None,
    ) -> ActionResult[Workpaper]:
        """
        Record the outcome of testing a workpaper.

        Recording a new result clears an earlier review.

        Args:
            workpaper_id: Workpaper that was tested.
            test_result: Conformity verdict.
            test_results: Narrative of the testing performed.
            user_id: Who recorded the result.

        Raises:
            EntityNotFoundError: If the workpaper does not exist.
        """
        workpaper = self._require(workpaper_id)

        validation = validate_workpaper({
            "clause": workpaper.clause,
            "objectives": workpaper.objectives,
            "test_procedures": workpaper.test_procedures,
            "test_results": test_results,
            "test_result": test_result,
        })
        errors = list(validation.errors)

        verdict: Optional[TestResult] = None
        if isinstance(test_result, TestResult):
            verdict = test_result
        elif test_result:
            try:
                verdict = TestResult(test_result)
            except ValueError:
                errors.append(f"Invalid test result: {test_result}")

        if errors:
            return ActionResult(success=False, message="Workpaper is invalid", errors=errors, data=workpaper)

        updated = self._workpapers.update(
            workpaper_id,
            test_result=verdict,
            test_results=test_results.strip(),
            reviewed_by=None,
            reviewed_date=None,
        )
        logger.info(f"Workpaper {workpaper_id} tested: {verdict.value}")

        if self._audit_logger is not None:
            self._audit_logger.log_workpaper_tested(
                updated.audit_id, workpaper_id, verdict.value, user_id=user_id
            )

        return ActionResult(success=True, message="Test result recorded", data=updated)

    def review(
        self,
        workpaper_id: str,
        reviewed_by: str,
        reviewed_date: Optional[date] = None,
    ) -> ActionResult[Workpaper]:
        """
        Sign off a tested workpaper.

        Raises:
            EntityNotFoundError: If the workpaper does not exist.
        """
        workpaper = self._require(workpaper_id)

        errors = []
        if not reviewed_by or not reviewed_by.strip():
            errors.append("Reviewer is required")
        if workpaper.test_result is None:
            errors.append("Test result must be recorded before review")
        if errors:
            return ActionResult(success=False, message="Workpaper cannot be reviewed", errors=errors, data=workpaper)

        updated = self._workpapers.update(
            workpaper_id,
            reviewed_by=reviewed_by.strip(),
            reviewed_date=reviewed_date or date.today(),
        )
        logger.info(f"Workpaper {workpaper_id} reviewed by {updated.reviewed_by}")

        if self._audit_logger is not None:
            self._audit_logger.log_workpaper_reviewed(updated.audit_id, workpaper_id, updated.reviewed_by)

        return ActionResult(success=True, message="Workpaper reviewed", data=updated)
