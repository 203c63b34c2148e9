"""Persistence for audit plans, workpapers, findings and the audit trail."""

from .audit_logger import AuditLogger
from .database import DatabaseManager, get_database_url
from .models import (
    AuditEventModel,
    AuditPlanModel,
    Base,
    FindingEventModel,
    FindingModel,
    WorkpaperModel,
)
from .repositories import (
    AuditPlanRepository,
    FindingEventRepository,
    FindingRepository,
    SqlAlchemyRepository,
    WorkpaperRepository,
)

__all__ = [
    "AuditEventModel",
    "AuditLogger",
    "AuditPlanModel",
    "AuditPlanRepository",
    "Base",
    "DatabaseManager",
    "FindingEventModel",
    "FindingEventRepository",
    "FindingModel",
    "FindingRepository",
    "SqlAlchemyRepository",
    "WorkpaperModel",
    "WorkpaperRepository",
    "get_database_url",
]
