"""FastAPI application for the GRC Audit Workpapers system.

Exposes the template catalog, audit plans with their category selection and
submit-for-review action, workpaper testing and review, and findings.

Usage (from project root, after installing the package):

    uvicorn grc_audit.api.app:app --reload

Database and template settings come from the environment; see
``grc_audit.storage.database.get_database_url`` and
``grc_audit.config.settings``.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Type, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..exceptions import EntityNotFoundError, InvalidTransitionError
from ..models.enums import AuditStatus, FindingSeverity, FindingStatus
from ..services.analytics import (
    calculate_audit_progress,
    calculate_conformity_rate,
    calculate_findings_summary,
    findings_by_clause,
)
from ..workflow.audit_plans import AuditPlanInput
from ..workflow.findings import FindingInput
from ..workflow.submission import PLAN_NOT_FOUND_MESSAGE, UNEXPECTED_ERROR_MESSAGE
from .dependencies import ApiServices, get_services
from .schemas import (
    AuditPlanCreateRequest,
    CategorySelectionRequest,
    FindingCreateRequest,
    FindingStatusRequest,
    FindingUpdateRequest,
    SubmitForReviewRequest,
    WorkpaperUpdateRequest,
)

E = TypeVar("E", bound=Enum)

app = FastAPI(title="GRC Audit Workpapers API", version="0.1.0")


@app.exception_handler(EntityNotFoundError)
async def entity_not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": exc.message, **exc.details})


def _parse_enum(enum_type: Type[E], value: str, field: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(e.value for e in enum_type)
        raise HTTPException(
            status_code=422,
            detail=f"Invalid {field} '{value}'. Expected one of: {allowed}",
        ) from exc


def _parse_enums(enum_type: Type[E], values: Optional[List[str]], field: str) -> Optional[List[E]]:
    if not values:
        return None
    return [_parse_enum(enum_type, v, field) for v in values]


def _rejected(message: str, errors: List[str]) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": message, "errors": errors},
    )


def _require_template(services: ApiServices, template_id: str) -> None:
    if services.templates.get_template(template_id) is None:
        raise HTTPException(status_code=404, detail=f"Template with ID '{template_id}' not found")


# =============================================================================
# Templates
# =============================================================================

@app.get("/api/templates")
async def list_templates(services: ApiServices = Depends(get_services)) -> JSONResponse:
    templates = services.templates.get_available_templates()
    return JSONResponse(content=[t.to_dict() for t in templates])


@app.get("/api/templates/{template_id}")
async def get_template(template_id: str, services: ApiServices = Depends(get_services)) -> JSONResponse:
    template = services.templates.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template with ID '{template_id}' not found")

    summary = services.templates.get_template_summary(template_id)
    return JSONResponse(content={**template.to_dict(), "summary": summary.to_dict()})


@app.get("/api/templates/{template_id}/categories")
async def get_template_categories(
    template_id: str,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    _require_template(services, template_id)
    categories = services.templates.get_template_categories(template_id)
    return JSONResponse(content=[c.to_dict() for c in categories])


@app.get("/api/templates/{template_id}/categories/grouped")
async def get_grouped_categories(
    template_id: str,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    _require_template(services, template_id)
    return JSONResponse(content=services.templates.get_categories_grouped(template_id).to_dict())


@app.get("/api/templates/{template_id}/recommended")
async def get_recommended_categories(
    template_id: str,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    _require_template(services, template_id)
    return JSONResponse(content={
        "templateId": template_id,
        "categoryIds": services.templates.get_recommended_categories(template_id),
    })


@app.get("/api/templates/{template_id}/search")
async def search_categories(
    template_id: str,
    q: str = Query(..., min_length=1, description="Text to match against names, descriptions and clauses"),
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    _require_template(services, template_id)
    categories = services.templates.search_categories(template_id, q)
    return JSONResponse(content=[c.to_dict() for c in categories])


@app.post("/api/templates/{template_id}/validate-selection")
async def validate_selection(
    template_id: str,
    body: CategorySelectionRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    """Validate a category selection. Always 200; the verdict is in the body."""
    result = services.templates.validate_category_selection(template_id, body.selected_categories)
    return JSONResponse(content=result.to_dict())


# =============================================================================
# Audit plans
# =============================================================================

@app.post("/api/audit-plans")
async def create_audit_plan(
    body: AuditPlanCreateRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    result = services.plans.create_plan(AuditPlanInput(
        title=body.title,
        template_id=body.template_id,
        objectives=body.objectives,
        team_leader=body.team_leader,
        start_date=body.start_date,
        end_date=body.end_date,
        scope=body.scope,
        team_members=body.team_members,
        standard=body.standard,
        selected_categories=body.selected_categories,
        created_by=body.created_by,
    ))
    if not result.success:
        return _rejected(result.message, result.errors)
    return JSONResponse(status_code=201, content=result.to_dict())


@app.get("/api/audit-plans")
async def list_audit_plans(
    status: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    team_leader: Optional[str] = Query(None, alias="teamLeader"),
    template_id: Optional[str] = Query(None, alias="templateId"),
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    plans = services.plans.list_plans(
        status=_parse_enums(AuditStatus, status, "status"),
        search=search,
        team_leader=team_leader,
        template_id=template_id,
    )
    return JSONResponse(content=[p.to_dict() for p in plans])


@app.get("/api/audit-plans/{audit_plan_id}")
async def get_audit_plan(audit_plan_id: str, services: ApiServices = Depends(get_services)) -> JSONResponse:
    plan = services.plans.get_plan(audit_plan_id)
    if plan is None:
        raise EntityNotFoundError("Audit plan", audit_plan_id)
    return JSONResponse(content=plan.to_dict())


@app.put("/api/audit-plans/{audit_plan_id}/categories")
async def update_audit_plan_categories(
    audit_plan_id: str,
    body: CategorySelectionRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    result = services.plans.update_selection(audit_plan_id, body.selected_categories, user_id=body.user_id)
    if not result.success:
        return _rejected(result.message, result.errors)
    return JSONResponse(content=result.to_dict())


@app.post("/api/audit-plans/{audit_plan_id}/submit")
async def submit_audit_plan(
    audit_plan_id: str,
    body: Optional[SubmitForReviewRequest] = None,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    """Generate workpapers from the plan's selection and move it to review."""
    prepared_by = body.prepared_by if body is not None else None
    result = services.submissions.submit(audit_plan_id, prepared_by=prepared_by)

    if result.success:
        status_code = 200
    elif result.message == PLAN_NOT_FOUND_MESSAGE:
        status_code = 404
    elif result.message == UNEXPECTED_ERROR_MESSAGE:
        status_code = 500
    elif result.errors:
        status_code = 422
    else:
        status_code = 409

    return JSONResponse(status_code=status_code, content=result.to_dict())


@app.get("/api/audit-plans/{audit_plan_id}/workpapers")
async def get_audit_plan_workpapers(
    audit_plan_id: str,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    if services.plans.get_plan(audit_plan_id) is None:
        raise EntityNotFoundError("Audit plan", audit_plan_id)
    workpapers = services.plans.get_workpapers(audit_plan_id)
    return JSONResponse(content=[w.to_dict() for w in workpapers])


@app.get("/api/audit-plans/{audit_plan_id}/analytics")
async def get_audit_plan_analytics(
    audit_plan_id: str,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    if services.plans.get_plan(audit_plan_id) is None:
        raise EntityNotFoundError("Audit plan", audit_plan_id)

    workpapers = services.plans.get_workpapers(audit_plan_id)
    findings = services.findings.list_findings(audit_id=audit_plan_id)
    return JSONResponse(content={
        "auditPlanId": audit_plan_id,
        "conformityRate": calculate_conformity_rate(workpapers),
        "progress": calculate_audit_progress(workpapers),
        "findings": calculate_findings_summary(findings).to_dict(),
        "findingsByClause": [entry.to_dict() for entry in findings_by_clause(findings)],
    })


@app.get("/api/audit-plans/{audit_plan_id}/audit-log")
async def export_audit_plan_log(
    audit_plan_id: str,
    format: str = Query("json", pattern="^(json|csv)$"),
    services: ApiServices = Depends(get_services),
):
    if services.plans.get_plan(audit_plan_id) is None:
        raise EntityNotFoundError("Audit plan", audit_plan_id)

    content = services.audit_logger.export_log(audit_plan_id, format=format)
    if format == "csv":
        return PlainTextResponse(content, media_type="text/csv")
    return PlainTextResponse(content, media_type="application/json")


# =============================================================================
# Workpapers
# =============================================================================

@app.get("/api/workpapers/{workpaper_id}")
async def get_workpaper(workpaper_id: str, services: ApiServices = Depends(get_services)) -> JSONResponse:
    workpaper = services.workpapers.get_workpaper(workpaper_id)
    if workpaper is None:
        raise EntityNotFoundError("Workpaper", workpaper_id)
    return JSONResponse(content=workpaper.to_dict())


@app.put("/api/workpapers/{workpaper_id}")
async def update_workpaper(
    workpaper_id: str,
    body: WorkpaperUpdateRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    """Record a test result, a review sign-off, or both in that order."""
    testing = body.test_result is not None or body.test_results is not None
    if not testing and body.reviewed_by is None:
        return _rejected("Workpaper update is empty", ["Provide a test result or a reviewer"])

    result = None
    if testing:
        result = services.workpapers.record_test_result(
            workpaper_id, body.test_result, body.test_results, user_id=body.user_id
        )
        if not result.success:
            return _rejected(result.message, result.errors)

    if body.reviewed_by is not None:
        result = services.workpapers.review(workpaper_id, body.reviewed_by, body.reviewed_date)
        if not result.success:
            return _rejected(result.message, result.errors)

    return JSONResponse(content=result.to_dict())


# =============================================================================
# Findings
# =============================================================================

@app.post("/api/findings")
async def create_finding(
    body: FindingCreateRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    result = services.findings.create_finding(FindingInput(
        audit_id=body.audit_id,
        clause=body.clause,
        clause_title=body.clause_title,
        description=body.description,
        severity=body.severity,
        recommendation=body.recommendation,
        workpaper_id=body.workpaper_id,
        assigned_to=body.assigned_to,
        due_date=body.due_date,
        corrective_action=body.corrective_action,
        created_by=body.created_by,
    ))
    if not result.success:
        return _rejected(result.message, result.errors)
    return JSONResponse(status_code=201, content=result.to_dict())


@app.get("/api/findings")
async def list_findings(
    audit_id: Optional[str] = Query(None, alias="auditId"),
    severity: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
    clause: Optional[str] = None,
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    search: Optional[str] = None,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    findings = services.findings.list_findings(
        audit_id=audit_id,
        severity=_parse_enums(FindingSeverity, severity, "severity"),
        status=_parse_enums(FindingStatus, status, "status"),
        clause=clause,
        assigned_to=assigned_to,
        search=search,
    )
    return JSONResponse(content=[f.to_dict() for f in findings])


@app.post("/api/findings/{finding_id}/status")
async def change_finding_status(
    finding_id: str,
    body: FindingStatusRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    new_status = _parse_enum(FindingStatus, body.status, "status")
    finding = services.findings.change_status(finding_id, new_status, body.user)
    return JSONResponse(content=finding.to_dict())


@app.patch("/api/findings/{finding_id}")
async def update_finding(
    finding_id: str,
    body: FindingUpdateRequest,
    services: ApiServices = Depends(get_services),
) -> JSONResponse:
    """Edit a finding's descriptive fields. Status has its own endpoint."""
    changes = body.model_dump(exclude_unset=True, exclude={"user"})

    errors = [
        f"{name.capitalize()} is required"
        for name in ("description", "recommendation")
        if name in changes and not (changes[name] or "").strip()
    ]
    if errors:
        return _rejected("Finding is invalid", errors)

    finding = services.findings.update_finding(finding_id, body.user, **changes)
    return JSONResponse(content=finding.to_dict())


@app.get("/api/findings/{finding_id}/timeline")
async def get_finding_timeline(finding_id: str, services: ApiServices = Depends(get_services)) -> JSONResponse:
    if services.findings.get_finding(finding_id) is None:
        raise EntityNotFoundError("Finding", finding_id)
    events = services.findings.get_timeline(finding_id)
    return JSONResponse(content=[e.to_dict() for e in events])
