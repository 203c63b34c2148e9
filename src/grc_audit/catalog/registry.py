"""Workpaper template registry.

Templates must be registered here to be addressable by the template service
and the API. Registration order is the order in which templates are listed.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..config.config_manager import ConfigurationManager
from ..config.models import ConfigurationError, ValidationResult
from ..models.catalog import WorkpaperTemplateDefinition
from .iso27001_2022 import ISO27001_2022_TEMPLATE


logger = logging.getLogger(__name__)


class TemplateCatalog:
    """
    Ordered, append-only collection of workpaper template definitions.

    Template ids are unique across the catalog and category ids are unique
    within each template.
    """

    def __init__(self, templates: Optional[Iterable[WorkpaperTemplateDefinition]] = None):
        self._templates: Dict[str, WorkpaperTemplateDefinition] = {}
        for template in templates or []:
            self.register(template)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    @staticmethod
    def validate_template(template: WorkpaperTemplateDefinition) -> ValidationResult:
        """Check a template definition before it enters the catalog."""
        result = ValidationResult(is_valid=True)
        prefix = f"Template '{template.id}'"

        if not template.id or not template.id.strip():
            result.add_error("Template 'id' must be a non-empty string")
        if not template.name or not template.name.strip():
            result.add_error(f"{prefix}: 'name' must be a non-empty string")

        ids = [c.id for c in template.categories]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            result.add_error(f"{prefix}: Duplicate category IDs found: {', '.join(duplicates)}")

        if not template.categories:
            result.add_warning(f"{prefix}: template has no categories")

        return result

    def register(self, template: WorkpaperTemplateDefinition) -> None:
        """
        Add a template to the catalog.

        Raises:
            ConfigurationError: If the template is malformed or its id is
                already registered.
        """
        result = self.validate_template(template)
        if template.id in self._templates:
            result.add_error(f"Template with ID '{template.id}' is already registered")
        if not result.is_valid:
            raise ConfigurationError(
                f"Cannot register template '{template.id}'",
                validation_result=result,
            )

        self._templates[template.id] = template
        logger.info(
            f"Registered template {template.id} with {len(template.categories)} categories"
        )

    @classmethod
    def from_configuration(
        cls,
        manager: ConfigurationManager,
        include_builtin: bool = True,
    ) -> "TemplateCatalog":
        """
        Build a catalog from templates loaded by a ConfigurationManager.

        Built-in templates come first, followed by loaded templates in the
        order they were declared. A loaded template reusing a built-in id is
        rejected like any other duplicate.
        """
        templates: List[WorkpaperTemplateDefinition] = []
        if include_builtin:
            templates.append(ISO27001_2022_TEMPLATE)
        templates.extend(manager.configuration.templates)
        return cls(templates)

    def get(self, template_id: str) -> Optional[WorkpaperTemplateDefinition]:
        return self._templates.get(template_id)

    def list(self) -> List[WorkpaperTemplateDefinition]:
        return list(self._templates.values())


def default_catalog() -> TemplateCatalog:
    """Catalog containing only the built-in templates."""
    return TemplateCatalog([ISO27001_2022_TEMPLATE])
