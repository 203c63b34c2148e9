"""Data models for configuration management."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import GrcAuditError
from ..models.catalog import Clause, WorkpaperTemplateDefinition


@dataclass
class CatalogConfiguration:
    """
    Complete catalog configuration.

    Aggregates the clause catalog and workpaper templates loaded from
    configuration sources.
    """
    clauses: List[Clause] = field(default_factory=list)
    templates: List[WorkpaperTemplateDefinition] = field(default_factory=list)
    version: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    def get_template(self, template_id: str) -> Optional[WorkpaperTemplateDefinition]:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


class ConfigurationError(GrcAuditError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.validation_result = validation_result
