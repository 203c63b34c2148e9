"""Abstract interfaces for the GRC Audit Workpapers system."""

from .audit import AuditEvent, AuditEventType, IAuditLogger
from .repository import IRepository

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "IAuditLogger",
    "IRepository",
]
