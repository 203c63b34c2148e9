"""Audit plan, submit-for-review and findings workflows."""

from .audit_plans import AuditPlanInput, AuditPlanService
from .findings import FINDING_TRANSITIONS, FindingInput, FindingService, can_transition
from .results import ActionResult, SubmissionResult
from .submission import ReviewSubmissionService
from .workpapers import WorkpaperService

__all__ = [
    "ActionResult",
    "AuditPlanInput",
    "AuditPlanService",
    "FINDING_TRANSITIONS",
    "FindingInput",
    "FindingService",
    "ReviewSubmissionService",
    "SubmissionResult",
    "WorkpaperService",
    "can_transition",
]
