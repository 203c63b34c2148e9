"""Service wiring for the HTTP API."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from ..catalog.clauses import DEFAULT_CLAUSE_CATALOG, ClauseCatalog
from ..catalog.registry import TemplateCatalog, default_catalog
from ..config.config_manager import ConfigurationManager
from ..config.models import ConfigurationError
from ..config.settings import get_template_config_dir
from ..services.template_service import TemplateService
from ..storage.audit_logger import AuditLogger
from ..storage.database import DatabaseManager
from ..workflow.audit_plans import AuditPlanService
from ..workflow.findings import FindingService
from ..workflow.submission import ReviewSubmissionService
from ..workflow.workpapers import WorkpaperService


logger = logging.getLogger(__name__)


@dataclass
class ApiServices:
    """Everything the API endpoints need, sharing one database manager."""
    db_manager: DatabaseManager
    templates: TemplateService
    audit_logger: AuditLogger
    plans: AuditPlanService
    submissions: ReviewSubmissionService
    workpapers: WorkpaperService
    findings: FindingService

    @classmethod
    def create(
        cls,
        db_manager: DatabaseManager,
        catalog: Optional[TemplateCatalog] = None,
        clause_catalog: Optional[ClauseCatalog] = None,
    ) -> "ApiServices":
        templates = TemplateService(catalog)
        audit_logger = AuditLogger(db_manager=db_manager)
        return cls(
            db_manager=db_manager,
            templates=templates,
            audit_logger=audit_logger,
            plans=AuditPlanService(db_manager, templates, audit_logger),
            submissions=ReviewSubmissionService(db_manager, templates, audit_logger),
            workpapers=WorkpaperService(db_manager, audit_logger=audit_logger),
            findings=FindingService(
                db_manager,
                clause_catalog=clause_catalog or DEFAULT_CLAUSE_CATALOG,
                audit_logger=audit_logger,
            ),
        )


@dataclass
class ConfiguredCatalogs:
    """Template and clause catalogs the API serves."""
    templates: TemplateCatalog
    clauses: ClauseCatalog


def load_catalogs_from_environment() -> ConfiguredCatalogs:
    """
    Built-in catalogs plus any configuration found in GRC_TEMPLATE_CONFIG_DIR.

    Templates from ``templates.json`` are added after the built-in ones. A
    ``clauses.json`` replaces the built-in clause catalog.

    Raises:
        ConfigurationError: If the configured directory holds invalid
            configuration.
    """
    config_dir = get_template_config_dir()
    if config_dir is None:
        return ConfiguredCatalogs(templates=default_catalog(), clauses=DEFAULT_CLAUSE_CATALOG)

    manager = ConfigurationManager()
    result = manager.load_from_directory(config_dir)
    if not result.is_valid:
        raise ConfigurationError(
            f"Invalid template configuration in {config_dir}",
            validation_result=result,
        )
    for warning in result.warnings:
        logger.warning(warning)

    clauses = manager.configuration.clauses
    if clauses:
        logger.info(f"Using {len(clauses)} configured clauses from {config_dir}")
    return ConfiguredCatalogs(
        templates=TemplateCatalog.from_configuration(manager),
        clauses=ClauseCatalog(clauses) if clauses else DEFAULT_CLAUSE_CATALOG,
    )


@lru_cache(maxsize=1)
def get_services() -> ApiServices:
    """Services built from environment settings, created on first use."""
    db_manager = DatabaseManager()
    db_manager.init_database()
    catalogs = load_catalogs_from_environment()
    return ApiServices.create(db_manager, catalogs.templates, catalogs.clauses)
