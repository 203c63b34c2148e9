"""Configuration Manager implementation for the GRC Audit Workpapers system.

This module provides functionality to load, validate, and manage the clause
catalog and workpaper template definitions from JSON configuration.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..models.catalog import Clause, TemplateCategory, WorkpaperTemplateDefinition
from ..models.enums import CategoryGroup, ClauseKind
from .models import CatalogConfiguration, ConfigurationError, ValidationResult


logger = logging.getLogger(__name__)

Source = Union[str, Path, Dict[str, Any], List[Dict[str, Any]]]


class ConfigurationManager:
    """
    Manager for catalog configuration.

    Handles loading, validation, and access to clause definitions and
    workpaper templates.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional directory path for configuration files.
        """
        self._config_dir = Path(config_dir) if config_dir else None
        self._configuration = CatalogConfiguration()
        self._is_loaded = False

    @property
    def configuration(self) -> CatalogConfiguration:
        """Get the current catalog configuration."""
        return self._configuration

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._is_loaded

    # =========================================================================
    # Clause Methods
    # =========================================================================

    def load_clauses(self, source: Source) -> ValidationResult:
        """
        Load and validate clause definitions.

        Supports loading from:
        - JSON file path
        - Dictionary with a "clauses" list
        - List of clause dictionaries

        Args:
            source: File path, dictionary, or list of dictionaries.

        Returns:
            ValidationResult indicating success or failure with details.

        Raises:
            ConfigurationError: If validation fails and configuration cannot be applied.
        """
        clauses_data = self._unwrap(self._parse_source(source), "clauses")

        result = ValidationResult(is_valid=True)
        clauses: List[Clause] = []

        for i, clause_dict in enumerate(clauses_data):
            clause_result, clause = self._validate_clause(clause_dict, index=i)
            result = result.merge(clause_result)
            if clause:
                clauses.append(clause)

        ids = [c.id for c in clauses]
        duplicates = [id for id in ids if ids.count(id) > 1]
        if duplicates:
            result.add_error(f"Duplicate clause IDs found: {sorted(set(duplicates))}")

        numbers = [c.number for c in clauses]
        duplicate_numbers = [n for n in numbers if numbers.count(n) > 1]
        if duplicate_numbers:
            result.add_error(f"Duplicate clause numbers found: {sorted(set(duplicate_numbers))}")

        known_ids = set(ids)
        for clause in clauses:
            if clause.parent is not None and clause.parent not in known_ids:
                result.add_error(
                    f"Clause '{clause.id}' references unknown parent '{clause.parent}'"
                )

        if not result.is_valid:
            raise ConfigurationError(
                "Clause catalog validation failed",
                validation_result=result
            )

        self._configuration.clauses = clauses
        self._is_loaded = True
        logger.info(f"Loaded {len(clauses)} clauses")

        return result

    def _validate_clause(
        self,
        data: Dict[str, Any],
        index: int = 0
    ) -> Tuple[ValidationResult, Optional[Clause]]:
        """Validate a single clause dictionary."""
        result = ValidationResult(is_valid=True)
        prefix = f"Clause [{index}]"

        for field in ("id", "number", "title", "category"):
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")

        if not result.is_valid:
            return result, None

        for field in ("id", "number", "title"):
            if not isinstance(data[field], str) or not data[field].strip():
                result.add_error(f"{prefix}: '{field}' must be a non-empty string")

        valid_kinds = [k.value for k in ClauseKind]
        if data["category"] not in valid_kinds:
            result.add_error(f"{prefix}: 'category' must be one of {valid_kinds}")

        parent = data.get("parent")
        if parent is not None and (not isinstance(parent, str) or not parent.strip()):
            result.add_error(f"{prefix}: 'parent' must be a non-empty string when present")

        if not result.is_valid:
            return result, None

        clause = Clause(
            id=data["id"].strip(),
            number=data["number"].strip(),
            title=data["title"].strip(),
            description=(data.get("description") or "").strip(),
            kind=ClauseKind(data["category"]),
            parent=parent.strip() if parent else None,
        )

        return result, clause

    def get_clause(self, clause_id: str) -> Optional[Clause]:
        """Get a loaded clause by ID."""
        for clause in self._configuration.clauses:
            if clause.id == clause_id:
                return clause
        return None

    # =========================================================================
    # Template Methods
    # =========================================================================

    def load_templates(self, source: Source) -> ValidationResult:
        """
        Load and validate workpaper template definitions.

        Template records use the same shape the API exposes: ``displayName``,
        ``isRequired``, ``auditProcedure`` and ``clauseRange`` keys.

        Args:
            source: File path, dictionary, or list of dictionaries.

        Returns:
            ValidationResult indicating success or failure with details.

        Raises:
            ConfigurationError: If validation fails and configuration cannot be applied.
        """
        templates_data = self._unwrap(self._parse_source(source), "templates")

        result = ValidationResult(is_valid=True)
        templates: List[WorkpaperTemplateDefinition] = []

        for i, template_dict in enumerate(templates_data):
            template_result, template = self._validate_template(template_dict, index=i)
            result = result.merge(template_result)
            if template:
                templates.append(template)

        ids = [t.id for t in templates]
        duplicates = [id for id in ids if ids.count(id) > 1]
        if duplicates:
            result.add_error(f"Duplicate template IDs found: {sorted(set(duplicates))}")

        if not result.is_valid:
            raise ConfigurationError(
                "Template validation failed",
                validation_result=result
            )

        self._configuration.templates = templates
        self._is_loaded = True
        logger.info(f"Loaded {len(templates)} workpaper templates")

        return result

    def _validate_template(
        self,
        data: Dict[str, Any],
        index: int = 0
    ) -> Tuple[ValidationResult, Optional[WorkpaperTemplateDefinition]]:
        """Validate a single template dictionary and its categories."""
        result = ValidationResult(is_valid=True)
        prefix = f"Template [{index}]"

        for field in ("id", "name", "categories"):
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")

        if not result.is_valid:
            return result, None

        if not isinstance(data["id"], str) or not data["id"].strip():
            result.add_error(f"{prefix}: 'id' must be a non-empty string")
        if not isinstance(data["name"], str) or not data["name"].strip():
            result.add_error(f"{prefix}: 'name' must be a non-empty string")
        if not isinstance(data["categories"], list):
            result.add_error(f"{prefix}: 'categories' must be a list")

        if not result.is_valid:
            return result, None

        categories: List[TemplateCategory] = []
        for j, category_dict in enumerate(data["categories"]):
            category_result, category = self._validate_category(
                category_dict, prefix=f"{prefix} category [{j}]"
            )
            result = result.merge(category_result)
            if category:
                categories.append(category)

        category_ids = [c.id for c in categories]
        duplicates = [id for id in category_ids if category_ids.count(id) > 1]
        if duplicates:
            result.add_error(f"{prefix}: Duplicate category IDs found: {sorted(set(duplicates))}")

        if not categories:
            result.add_warning(f"{prefix}: template '{data['id']}' has no categories")

        if not result.is_valid:
            return result, None

        template = WorkpaperTemplateDefinition(
            id=data["id"].strip(),
            name=data["name"].strip(),
            description=(data.get("description") or "").strip(),
            version=data.get("version"),
            categories=tuple(categories),
        )

        return result, template

    def _validate_category(
        self,
        data: Dict[str, Any],
        prefix: str
    ) -> Tuple[ValidationResult, Optional[TemplateCategory]]:
        """Validate a single template category dictionary."""
        result = ValidationResult(is_valid=True)

        required_fields = ["id", "name", "group", "clauses", "objectives", "scope", "auditProcedure"]
        for field in required_fields:
            if field not in data:
                result.add_error(f"{prefix}: Missing required field '{field}'")

        if not result.is_valid:
            return result, None

        for field in ("id", "name"):
            if not isinstance(data[field], str) or not data[field].strip():
                result.add_error(f"{prefix}: '{field}' must be a non-empty string")

        valid_groups = [g.value for g in CategoryGroup]
        if data["group"] not in valid_groups:
            result.add_error(f"{prefix}: 'group' must be one of {valid_groups}")

        if not isinstance(data["clauses"], list):
            result.add_error(f"{prefix}: 'clauses' must be a list")
        elif not all(isinstance(c, str) for c in data["clauses"]):
            result.add_error(f"{prefix}: All clauses must be strings")
        elif not data["clauses"]:
            result.add_warning(f"{prefix}: category references no clauses")

        if "isRequired" in data and not isinstance(data["isRequired"], bool):
            result.add_error(f"{prefix}: 'isRequired' must be a boolean")

        if not result.is_valid:
            return result, None

        name = data["name"].strip()
        category = TemplateCategory(
            id=data["id"].strip(),
            name=name,
            display_name=(data.get("displayName") or name).strip(),
            group=CategoryGroup(data["group"]),
            clauses=tuple(c.strip() for c in data["clauses"]),
            is_required=data.get("isRequired", False),
            objectives=data["objectives"],
            scope=data["scope"],
            audit_procedure=data["auditProcedure"],
            description=data.get("description"),
            clause_range=data.get("clauseRange"),
        )

        return result, category

    def get_template(self, template_id: str) -> Optional[WorkpaperTemplateDefinition]:
        """Get a loaded template by ID."""
        return self._configuration.get_template(template_id)

    # =========================================================================
    # Configuration Validation Methods
    # =========================================================================

    def validate_configuration(
        self,
        config: Optional[CatalogConfiguration] = None
    ) -> ValidationResult:
        """
        Validate the complete catalog configuration.

        Template categories should only reference clause numbers that exist
        in the loaded clause catalog. Unknown references are reported as
        warnings.

        Args:
            config: Configuration to validate. Uses current config if None.

        Returns:
            ValidationResult with all errors and warnings.
        """
        config = config or self._configuration
        result = ValidationResult(is_valid=True)

        if not config.clauses:
            return result

        known_numbers = {c.number for c in config.clauses}
        for template in config.templates:
            for category in template.categories:
                unknown = [n for n in category.clauses if n not in known_numbers]
                if unknown:
                    result.add_warning(
                        f"Category '{template.id}/{category.id}' references clauses "
                        f"missing from the clause catalog: {unknown}"
                    )

        return result

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _parse_source(self, source: Source) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            with open(path, "r", encoding="utf-8") as f:
                try:
                    return json.load(f)
                except json.JSONDecodeError as e:
                    raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

        return source

    @staticmethod
    def _unwrap(raw_data: Union[Dict[str, Any], List[Dict[str, Any]]], key: str) -> List[Dict[str, Any]]:
        """Handle both single dict, wrapped dict and list formats."""
        if isinstance(raw_data, dict):
            if key in raw_data:
                return raw_data[key]
            return [raw_data]
        return raw_data

    def load_from_directory(self, config_dir: Union[str, Path]) -> ValidationResult:
        """
        Load all configuration files from a directory.

        Expects files named:
        - clauses.json
        - templates.json

        Args:
            config_dir: Directory containing configuration files.

        Returns:
            Combined ValidationResult for all loaded configurations.
        """
        config_dir = Path(config_dir)
        result = ValidationResult(is_valid=True)

        clauses_file = config_dir / "clauses.json"
        if clauses_file.exists():
            try:
                result = result.merge(self.load_clauses(clauses_file))
            except ConfigurationError as e:
                result.add_error(f"Clause loading failed: {e.message}")
                if e.validation_result:
                    result = result.merge(e.validation_result)

        templates_file = config_dir / "templates.json"
        if templates_file.exists():
            try:
                result = result.merge(self.load_templates(templates_file))
            except ConfigurationError as e:
                result.add_error(f"Template loading failed: {e.message}")
                if e.validation_result:
                    result = result.merge(e.validation_result)

        if result.is_valid:
            result = result.merge(self.validate_configuration())

        self._config_dir = config_dir
        return result

    def save_to_directory(
        self,
        config_dir: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Save current configuration to a directory.

        Args:
            config_dir: Directory to save to. Uses current config_dir if None.
        """
        config_dir = Path(config_dir) if config_dir else self._config_dir
        if not config_dir:
            raise ConfigurationError("No configuration directory specified")

        config_dir.mkdir(parents=True, exist_ok=True)

        if self._configuration.clauses:
            clauses_data = {"clauses": [c.to_dict() for c in self._configuration.clauses]}
            with open(config_dir / "clauses.json", "w", encoding="utf-8") as f:
                json.dump(clauses_data, f, indent=2, ensure_ascii=False)

        if self._configuration.templates:
            templates_data = {"templates": [t.to_dict() for t in self._configuration.templates]}
            with open(config_dir / "templates.json", "w", encoding="utf-8") as f:
                json.dump(templates_data, f, indent=2, ensure_ascii=False)

    def reset(self) -> None:
        """Reset configuration to empty state."""
        self._configuration = CatalogConfiguration()
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        return {
            "version": self._configuration.version,
            "clauses": [c.to_dict() for c in self._configuration.clauses],
            "templates": [t.to_dict() for t in self._configuration.templates],
            "metadata": self._configuration.metadata,
        }
