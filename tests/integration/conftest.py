"""Shared fixtures for integration tests against a SQLite database."""

from datetime import date

import pytest

from grc_audit.catalog import ISO27001_2022_TEMPLATE, TemplateCatalog
from grc_audit.models import CategoryGroup, TemplateCategory, WorkpaperTemplateDefinition
from grc_audit.services import TemplateService
from grc_audit.storage import AuditLogger, DatabaseManager
from grc_audit.workflow import AuditPlanInput


@pytest.fixture
def db_manager(tmp_path):
    """File-backed SQLite database with the schema created."""
    manager = DatabaseManager(database_url=f"sqlite:///{tmp_path / 'grc_audit.db'}")
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def audit_logger(db_manager):
    return AuditLogger(db_manager=db_manager)


def _category(id, name, clauses, is_required=False, group=CategoryGroup.MAIN_CLAUSES):
    return TemplateCategory(
        id=id,
        name=name,
        display_name=name,
        group=group,
        clauses=clauses,
        is_required=is_required,
        objectives=f"Assess {name.lower()}",
        scope=f"{name} processes",
        audit_procedure="1. Review documentation\n2. Interview owners",
    )


@pytest.fixture
def strict_template_service():
    """Template service whose ISO template requires the context category."""
    template = WorkpaperTemplateDefinition(
        id="iso27001-2022",
        name="ISO 27001:2022",
        description="ISO template with a mandatory context clause",
        categories=(
            _category("ctx-4", "Context of the Organization", ("4.1", "4.2", "4.3", "4.4"), is_required=True),
            _category("leadership-5", "Leadership", ("5.1", "5.2", "5.3")),
            _category("org-a5", "Organisational Controls", ("A.5.1",), group=CategoryGroup.ANNEX_A_CONTROLS),
        ),
    )
    return TemplateService(TemplateCatalog([template]))


@pytest.fixture
def template_service():
    return TemplateService(TemplateCatalog([ISO27001_2022_TEMPLATE]))


def make_plan_input(**overrides):
    data = dict(
        title="Q3 ISMS internal audit",
        template_id="iso27001-2022",
        objectives="Assess ISMS conformity with ISO 27001:2022",
        team_leader="alice",
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 15),
        scope=["Head office", "Data centre"],
        team_members=["bob"],
        selected_categories=[],
        created_by="alice",
    )
    data.update(overrides)
    return AuditPlanInput(**data)


@pytest.fixture
def plan_input():
    """Factory for audit plan input with overridable fields."""
    return make_plan_input
