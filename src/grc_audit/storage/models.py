"""SQLAlchemy models for audit plans, workpapers, findings and the audit trail."""

from datetime import datetime
import uuid

from sqlalchemy import (
    Column,
    String,
    Date,
    DateTime,
    Integer,
    Text,
    ForeignKey,
    Index,
    CheckConstraint,
    JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def _new_id() -> str:
    return str(uuid.uuid4())


class JSONType(TypeDecorator):
    """Platform-independent JSON type.

    Uses JSONB for PostgreSQL and JSON for other databases (like SQLite).
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class AuditPlanModel(Base):
    """Audit plans table model."""
    __tablename__ = "audit_plans"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    standard = Column(String(100), nullable=False)
    template_id = Column(String(100), nullable=False)
    scope = Column(JSONType, nullable=False, default=list)
    objectives = Column(Text, nullable=False)
    team_leader = Column(String(100), nullable=False)
    team_members = Column(JSONType, nullable=False, default=list)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="planned")
    progress = Column(Integer, nullable=False, default=0)
    selected_categories = Column(JSONType, nullable=False, default=list)
    conformity_rate = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('planned', 'in-progress', 'under-review', 'completed', 'cancelled')",
            name="check_audit_plan_status",
        ),
        CheckConstraint("progress BETWEEN 0 AND 100", name="check_audit_plan_progress"),
        Index("idx_audit_plans_status", "status"),
        Index("idx_audit_plans_start_date", "start_date"),
    )


class WorkpaperModel(Base):
    """Workpapers table model."""
    __tablename__ = "workpapers"

    id = Column(String(36), primary_key=True, default=_new_id)
    audit_id = Column(String(36), ForeignKey("audit_plans.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(100), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    clause = Column(String(50), nullable=False)
    clause_title = Column(String(255), nullable=False)
    objectives = Column(Text, nullable=False)
    scope = Column(Text, nullable=False, default="")
    test_procedures = Column(Text, nullable=False)
    test_results = Column(Text, nullable=False, default="")
    test_result = Column(String(30), nullable=True)
    prepared_by = Column(String(100), nullable=False)
    prepared_date = Column(Date, nullable=False)
    reviewed_by = Column(String(100), nullable=True)
    reviewed_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "test_result IS NULL OR test_result IN ('conformity', 'partial-conformity', 'non-conformity')",
            name="check_workpaper_test_result",
        ),
        Index("idx_workpapers_audit_id", "audit_id", "position"),
    )


class FindingModel(Base):
    """Findings table model."""
    __tablename__ = "findings"

    id = Column(String(36), primary_key=True, default=_new_id)
    reference_code = Column(String(20), nullable=False, unique=True)
    audit_id = Column(String(36), ForeignKey("audit_plans.id", ondelete="CASCADE"), nullable=False)
    workpaper_id = Column(String(36), ForeignKey("workpapers.id", ondelete="SET NULL"), nullable=True)
    clause = Column(String(50), nullable=False)
    clause_title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False, default="open")
    recommendation = Column(Text, nullable=False)
    corrective_action = Column(Text, nullable=True)
    assigned_to = Column(String(100), nullable=True)
    due_date = Column(Date, nullable=True)
    resolved_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("severity IN ('critical', 'high', 'medium', 'low')", name="check_finding_severity"),
        CheckConstraint(
            "status IN ('open', 'in-progress', 'resolved', 'closed')",
            name="check_finding_status",
        ),
        Index("idx_findings_audit_id", "audit_id"),
        Index("idx_findings_status", "status"),
        Index("idx_findings_severity", "severity"),
    )


class FindingEventModel(Base):
    """Finding timeline events table model."""
    __tablename__ = "finding_events"

    id = Column(String(36), primary_key=True, default=_new_id)
    finding_id = Column(String(36), ForeignKey("findings.id", ondelete="CASCADE"), nullable=False)
    event_type = Column(String(30), nullable=False)
    description = Column(Text, nullable=False)
    user_name = Column(String(100), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        Index("idx_finding_events_finding_id", "finding_id", "timestamp"),
    )


class AuditEventModel(Base):
    """Audit trail events table model."""
    __tablename__ = "audit_events"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_type = Column(String(50), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow)
    audit_plan_id = Column(String(36), nullable=True)
    entity_id = Column(String(36), nullable=True)
    user_id = Column(String(100), nullable=True)
    details = Column(JSONType)

    __table_args__ = (
        Index("idx_audit_events_event_type", "event_type"),
        Index("idx_audit_events_timestamp", "timestamp"),
        Index("idx_audit_events_audit_plan_id", "audit_plan_id"),
        Index("idx_audit_events_user_id", "user_id"),
    )
