"""Audit analytics and record validation.

Aggregations over workpapers and findings used by dashboards and reports,
finding reference code generation, and field-level validation of audit
records before they are stored.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..models.audit import AuditPlan, Finding, Workpaper
from ..models.enums import AuditStatus, FindingSeverity, FindingStatus, TestResult

REFERENCE_CODE_PREFIX = "FND"


@dataclass
class RecordValidationResult:
    """Outcome of validating a record's fields."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


@dataclass
class FindingsSummary:
    """Finding counts per severity and status."""
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    overdue: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "open": self.open,
            "inProgress": self.in_progress,
            "resolved": self.resolved,
            "closed": self.closed,
            "overdue": self.overdue,
        }


@dataclass
class ClauseFindings:
    """Findings raised against one clause, counted by severity."""
    clause: str
    clause_title: str
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clause": self.clause,
            "clauseTitle": self.clause_title,
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "total": self.total,
        }


@dataclass
class ConformityTrendPoint:
    """Monthly conformity percentages."""
    month: date
    conformity_rate: int
    partial_conformity_rate: int
    non_conformity_rate: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.month.isoformat(),
            "conformityRate": self.conformity_rate,
            "partialConformityRate": self.partial_conformity_rate,
            "nonConformityRate": self.non_conformity_rate,
        }


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return round(part / whole * 100)


# =============================================================================
# Dates
# =============================================================================

def is_overdue(due: date, today: Optional[date] = None) -> bool:
    return due < (today or date.today())


def is_due_soon(due: date, days_threshold: int = 7, today: Optional[date] = None) -> bool:
    """True if ``due`` falls within the next ``days_threshold`` days, inclusive."""
    delta = (due - (today or date.today())).days
    return 0 <= delta <= days_threshold


def _finding_is_overdue(finding: Finding, today: Optional[date]) -> bool:
    if finding.due_date is None:
        return False
    if finding.status in (FindingStatus.RESOLVED, FindingStatus.CLOSED):
        return False
    return is_overdue(finding.due_date, today)


# =============================================================================
# Calculations
# =============================================================================

def calculate_conformity_rate(workpapers: List[Workpaper]) -> int:
    """Percentage of workpapers whose test result is conformity."""
    conforming = sum(1 for w in workpapers if w.test_result is TestResult.CONFORMITY)
    return _percent(conforming, len(workpapers))


def calculate_audit_progress(workpapers: List[Workpaper]) -> int:
    """Percentage of workpapers that have been reviewed."""
    reviewed = sum(1 for w in workpapers if w.reviewed_by and w.reviewed_date)
    return _percent(reviewed, len(workpapers))


def calculate_findings_summary(
    findings: List[Finding],
    today: Optional[date] = None
) -> FindingsSummary:
    """
    Count findings by severity and status.

    A finding is overdue when it has a due date in the past and is neither
    resolved nor closed.
    """
    summary = FindingsSummary(total=len(findings))
    for finding in findings:
        setattr(summary, finding.severity.value, getattr(summary, finding.severity.value) + 1)
        status_field = finding.status.value.replace("-", "_")
        setattr(summary, status_field, getattr(summary, status_field) + 1)
        if _finding_is_overdue(finding, today):
            summary.overdue += 1
    return summary


def severity_distribution(findings: List[Finding]) -> Dict[str, int]:
    distribution = {s.value: 0 for s in FindingSeverity}
    for finding in findings:
        distribution[finding.severity.value] += 1
    return distribution


def findings_by_clause(findings: List[Finding]) -> List[ClauseFindings]:
    """Group findings per clause, sorted by clause number."""
    by_clause: Dict[str, ClauseFindings] = {}
    for finding in findings:
        entry = by_clause.get(finding.clause)
        if entry is None:
            entry = ClauseFindings(clause=finding.clause, clause_title=finding.clause_title)
            by_clause[finding.clause] = entry
        setattr(entry, finding.severity.value, getattr(entry, finding.severity.value) + 1)
        entry.total += 1
    return sorted(by_clause.values(), key=lambda e: e.clause)


def conformity_trend(workpapers: List[Workpaper]) -> List[ConformityTrendPoint]:
    """Monthly conformity rates keyed on workpaper creation month."""
    months: Dict[date, Dict[Optional[TestResult], int]] = OrderedDict()
    for workpaper in workpapers:
        if workpaper.created_at is None:
            continue
        month = workpaper.created_at.date().replace(day=1)
        counts = months.setdefault(month, {})
        counts[workpaper.test_result] = counts.get(workpaper.test_result, 0) + 1

    points = []
    for month in sorted(months):
        counts = months[month]
        total = sum(counts.values())
        points.append(ConformityTrendPoint(
            month=month,
            conformity_rate=_percent(counts.get(TestResult.CONFORMITY, 0), total),
            partial_conformity_rate=_percent(counts.get(TestResult.PARTIAL_CONFORMITY, 0), total),
            non_conformity_rate=_percent(counts.get(TestResult.NON_CONFORMITY, 0), total),
        ))
    return points


# =============================================================================
# Sorting
# =============================================================================

def sort_findings_by_severity(findings: Iterable[Finding]) -> List[Finding]:
    """Most severe first; ties keep their original order."""
    return sorted(findings, key=lambda f: f.severity.rank)


def sort_audits_by_date(audits: Iterable[AuditPlan], descending: bool = True) -> List[AuditPlan]:
    return sorted(audits, key=lambda a: a.start_date, reverse=descending)


def get_upcoming_audits(
    audits: Iterable[AuditPlan],
    days: int = 30,
    today: Optional[date] = None
) -> List[AuditPlan]:
    """Planned audits starting after today and within ``days`` days."""
    today = today or date.today()
    horizon = today + timedelta(days=days)
    upcoming = [
        a for a in audits
        if a.status is AuditStatus.PLANNED and today < a.start_date < horizon
    ]
    return sorted(upcoming, key=lambda a: a.start_date)


# =============================================================================
# Reference codes
# =============================================================================

def generate_finding_reference_code(year: int, sequence: int) -> str:
    """Reference code such as ``FND-2025-001``."""
    return f"{REFERENCE_CODE_PREFIX}-{year}-{sequence:03d}"


def next_finding_reference_code(existing_codes: Iterable[str], year: int) -> str:
    """
    Next reference code for ``year`` given the codes already issued.

    The sequence continues from the highest sequence issued that year, so
    gaps left by deleted findings are never reused.
    """
    prefix = f"{REFERENCE_CODE_PREFIX}-{year}-"
    highest = 0
    for code in existing_codes:
        if not code.startswith(prefix):
            continue
        suffix = code[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return generate_finding_reference_code(year, highest + 1)


# =============================================================================
# Validation
# =============================================================================

def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_audit_plan(data: Dict[str, Any]) -> RecordValidationResult:
    """
    Validate audit plan fields.

    Args:
        data: Plan fields keyed by attribute name (``title``, ``scope``,
              ``objectives``, ``team_leader``, ``start_date``, ``end_date``).
    """
    errors: List[str] = []

    if _blank(data.get("title")):
        errors.append("Title is required")
    if not data.get("scope"):
        errors.append("At least one scope item is required")
    if _blank(data.get("objectives")):
        errors.append("Objectives are required")
    if _blank(data.get("team_leader")):
        errors.append("Team leader is required")

    start, end = data.get("start_date"), data.get("end_date")
    if start and end and start > end:
        errors.append("End date must be after start date")

    return RecordValidationResult(valid=not errors, errors=errors)


def validate_finding(data: Dict[str, Any]) -> RecordValidationResult:
    errors: List[str] = []

    if _blank(data.get("description")):
        errors.append("Description is required")
    if _blank(data.get("recommendation")):
        errors.append("Recommendation is required")
    if _blank(data.get("clause")):
        errors.append("Clause is required")
    if not data.get("severity"):
        errors.append("Severity is required")

    return RecordValidationResult(valid=not errors, errors=errors)


def validate_workpaper(data: Dict[str, Any]) -> RecordValidationResult:
    """Validate a workpaper that is being completed after testing."""
    errors: List[str] = []

    if _blank(data.get("clause")):
        errors.append("Clause is required")
    if _blank(data.get("objectives")):
        errors.append("Objectives are required")
    if _blank(data.get("test_procedures")):
        errors.append("Test procedures are required")
    if _blank(data.get("test_results")):
        errors.append("Test results are required")
    if not data.get("test_result"):
        errors.append("Test result selection is required")

    return RecordValidationResult(valid=not errors, errors=errors)
