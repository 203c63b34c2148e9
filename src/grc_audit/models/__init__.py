"""Data models and enums for the GRC Audit Workpapers system."""

from .enums import (
    AuditStatus,
    CategoryGroup,
    ClauseKind,
    FindingSeverity,
    FindingStatus,
    TestResult,
)
from .catalog import Clause, TemplateCategory, TickMark, WorkpaperTemplateDefinition
from .audit import AuditPlan, Finding, FindingTimelineEvent, Workpaper

__all__ = [
    # Enums
    "AuditStatus",
    "CategoryGroup",
    "ClauseKind",
    "FindingSeverity",
    "FindingStatus",
    "TestResult",
    # Catalog models
    "Clause",
    "TemplateCategory",
    "TickMark",
    "WorkpaperTemplateDefinition",
    # Audit models
    "AuditPlan",
    "Finding",
    "FindingTimelineEvent",
    "Workpaper",
]
