"""Unit tests for the Audit Logger."""

import csv
import io
import json
import uuid
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from grc_audit.interfaces import AuditEvent, AuditEventType
from grc_audit.storage import AuditLogger


class MockSession:
    """Mock SQLAlchemy session for testing."""

    def __init__(self):
        self.added = []
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self._execute_results = []

    def add(self, obj):
        self.added.append(obj)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True

    def execute(self, query):
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(self._execute_results)
        return result

    def set_execute_results(self, results):
        self._execute_results = results


class MockDatabaseManager:
    """Mock DatabaseManager for testing."""

    def __init__(self):
        self._session = MockSession()
        self.closed = False

    def get_session(self):
        return MockContextManager(self._session)

    def close(self):
        self.closed = True


class MockContextManager:
    """Mock context manager for session."""

    def __init__(self, session):
        self._session = session

    def __enter__(self):
        return self._session

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._session.commit()
        else:
            self._session.rollback()
        self._session.close()
        return False


def _event(event_type, audit_plan_id, **details):
    return AuditEvent(
        id=str(uuid.uuid4()),
        event_type=event_type,
        timestamp=datetime(2025, 3, 1, 9, 30),
        audit_plan_id=audit_plan_id,
        entity_id=str(uuid.uuid4()),
        user_id="auditor1",
        details=details,
    )


class TestAuditLogger:
    """Tests for AuditLogger class."""

    def test_log_event_adds_to_session(self):
        """Test that log_event adds an event to the database session."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_event(_event(AuditEventType.AUDIT_PLAN_CREATED, "plan-1", title="Q1 ISMS audit"))

        assert len(db_manager._session.added) == 1
        assert db_manager._session.committed
        assert db_manager._session.closed

    def test_log_audit_plan_created(self):
        """Test logging an audit plan creation."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_audit_plan_created("plan-1", "Q1 ISMS audit", "iso27001-2022", user_id="lead")

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.AUDIT_PLAN_CREATED.value
        assert added.audit_plan_id == "plan-1"
        assert added.entity_id == "plan-1"
        assert added.user_id == "lead"
        assert added.details == {"title": "Q1 ISMS audit", "template_id": "iso27001-2022"}

    def test_log_selection_updated(self):
        """Test logging a category selection change."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_selection_updated("plan-1", ["leadership", "planning"])

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.SELECTION_UPDATED.value
        assert added.details["selected_categories"] == ["leadership", "planning"]
        assert added.details["count"] == 2
        assert added.user_id is None

    def test_log_submitted_for_review(self):
        """Test logging a submit-for-review."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_submitted_for_review("plan-1", ["wp-1", "wp-2", "wp-3"], user_id="lead")

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.SUBMITTED_FOR_REVIEW.value
        assert added.details["workpaper_count"] == 3

    def test_log_workpaper_created(self):
        """Test logging a workpaper creation against its workpaper id."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_workpaper_created("plan-1", "wp-1", "leadership", "5.1-5.3")

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.WORKPAPER_CREATED.value
        assert added.entity_id == "wp-1"
        assert added.details == {"category_id": "leadership", "clause": "5.1-5.3"}

    def test_log_workpaper_tested_and_reviewed(self):
        """Test logging a test result and a review sign-off."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_workpaper_tested("plan-1", "wp-1", "conformity", user_id="bob")
        logger.log_workpaper_reviewed("plan-1", "wp-1", "carol")

        tested, reviewed = db_manager._session.added
        assert tested.event_type == AuditEventType.WORKPAPER_TESTED.value
        assert tested.details == {"test_result": "conformity"}
        assert tested.user_id == "bob"
        assert reviewed.event_type == AuditEventType.WORKPAPER_REVIEWED.value
        assert reviewed.user_id == "carol"

    def test_log_finding_created(self):
        """Test logging a finding creation."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_finding_created("plan-1", "f-1", "FND-2025-001", "high", user_id="auditor1")

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.FINDING_CREATED.value
        assert added.details["reference_code"] == "FND-2025-001"
        assert added.details["severity"] == "high"

    def test_log_finding_status_changed(self):
        """Test logging a finding status transition."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_finding_status_changed("plan-1", "f-1", "open", "in-progress")

        added = db_manager._session.added[0]
        assert added.event_type == AuditEventType.FINDING_STATUS_CHANGED.value
        assert added.details == {"from_status": "open", "to_status": "in-progress"}

    def test_get_events_converts_models(self):
        """Test stored rows are returned as AuditEvent objects."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)
        model = logger._to_model(_event(AuditEventType.FINDING_CREATED, "plan-1", severity="low"))
        db_manager._session.set_execute_results([model])

        events = logger.get_events(audit_plan_id="plan-1", event_type=AuditEventType.FINDING_CREATED)

        assert len(events) == 1
        assert events[0].event_type is AuditEventType.FINDING_CREATED
        assert events[0].details == {"severity": "low"}

    def test_close_only_releases_owned_manager(self):
        """Test an injected database manager is left open on close."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.close()

        assert not db_manager.closed


class TestAuditLoggerExport:
    """Tests for audit log export functionality."""

    def test_export_json_format(self):
        """Test exporting an audit plan's log as JSON."""
        logger = AuditLogger(db_manager=MockDatabaseManager())
        events = [
            _event(AuditEventType.WORKPAPER_CREATED, "plan-1", category_id="leadership"),
            _event(AuditEventType.WORKPAPER_CREATED, "plan-1", category_id="planning"),
            _event(AuditEventType.SUBMITTED_FOR_REVIEW, "plan-1", workpaper_count=2),
        ]

        with patch.object(logger, "get_events", return_value=events):
            result = logger.export_log("plan-1", format="json")

        data = json.loads(result)
        assert "export_timestamp" in data
        assert data["audit_plan_id"] == "plan-1"
        assert data["event_count"] == 3
        assert data["event_counts"] == {"workpaper_created": 2, "submitted_for_review": 1}
        assert data["events"][0]["timestamp"] == "2025-03-01T09:30:00"

    def test_export_csv_format(self):
        """Test exporting an audit plan's log as CSV."""
        logger = AuditLogger(db_manager=MockDatabaseManager())
        events = [_event(AuditEventType.FINDING_CREATED, "plan-1", reference_code="FND-2025-001")]

        with patch.object(logger, "get_events", return_value=events):
            result = logger.export_log("plan-1", format="csv")

        rows = list(csv.reader(io.StringIO(result)))
        assert rows[0] == [
            "id", "event_type", "timestamp", "audit_plan_id", "entity_id", "user_id", "details",
        ]
        assert len(rows) == 2
        assert rows[1][1] == "finding_created"
        assert json.loads(rows[1][6]) == {"reference_code": "FND-2025-001"}

    def test_export_invalid_format_raises_error(self):
        """Test that invalid export format raises ValueError."""
        logger = AuditLogger(db_manager=MockDatabaseManager())

        with pytest.raises(ValueError) as exc_info:
            logger.export_log("plan-1", format="xml")

        assert "Unsupported export format" in str(exc_info.value)
