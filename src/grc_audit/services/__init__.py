"""Domain services: template lookup/validation and audit analytics."""

from .analytics import (
    ClauseFindings,
    ConformityTrendPoint,
    FindingsSummary,
    RecordValidationResult,
    calculate_audit_progress,
    calculate_conformity_rate,
    calculate_findings_summary,
    conformity_trend,
    findings_by_clause,
    generate_finding_reference_code,
    get_upcoming_audits,
    is_due_soon,
    is_overdue,
    next_finding_reference_code,
    severity_distribution,
    sort_audits_by_date,
    sort_findings_by_severity,
    validate_audit_plan,
    validate_finding,
    validate_workpaper,
)
from .template_service import (
    GroupedCategories,
    SelectionValidationResult,
    TemplateService,
    TemplateSummary,
    format_category_display_name,
    get_category_clause_display,
    get_group_display_name,
)

__all__ = [
    # Template service
    "GroupedCategories",
    "SelectionValidationResult",
    "TemplateService",
    "TemplateSummary",
    "format_category_display_name",
    "get_category_clause_display",
    "get_group_display_name",
    # Analytics
    "ClauseFindings",
    "ConformityTrendPoint",
    "FindingsSummary",
    "RecordValidationResult",
    "calculate_audit_progress",
    "calculate_conformity_rate",
    "calculate_findings_summary",
    "conformity_trend",
    "findings_by_clause",
    "generate_finding_reference_code",
    "get_upcoming_audits",
    "is_due_soon",
    "is_overdue",
    "next_finding_reference_code",
    "severity_distribution",
    "sort_audits_by_date",
    "sort_findings_by_severity",
    "validate_audit_plan",
    "validate_finding",
    "validate_workpaper",
]
