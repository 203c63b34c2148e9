"""Template service.

Read and validation layer over the workpaper template catalog: template and
category lookup, grouping, search, recommendations and validation of a
user's category selection. Nothing here performs I/O or mutates the catalog.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from ..catalog.iso27001_2022 import ISO27001_2022_TEMPLATE, ISO27001_2022_TEMPLATE_ID
from ..catalog.registry import TemplateCatalog, default_catalog
from ..models.catalog import TemplateCategory, WorkpaperTemplateDefinition
from ..models.enums import CategoryGroup


@dataclass
class SelectionValidationResult:
    """Outcome of validating a category selection against a template."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


@dataclass
class GroupedCategories:
    """A template's categories partitioned by group, each in template order."""
    main_clauses: List[TemplateCategory] = field(default_factory=list)
    annex_a_controls: List[TemplateCategory] = field(default_factory=list)

    def for_group(self, group: CategoryGroup) -> List[TemplateCategory]:
        if group is CategoryGroup.MAIN_CLAUSES:
            return self.main_clauses
        return self.annex_a_controls

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainClauses": [c.to_dict() for c in self.main_clauses],
            "annexAControls": [c.to_dict() for c in self.annex_a_controls],
        }


@dataclass
class TemplateSummary:
    """Category counts for a template."""
    id: str
    name: str
    description: str
    total_categories: int
    main_clauses_count: int
    annex_a_controls_count: int
    required_categories_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "totalCategories": self.total_categories,
            "mainClausesCount": self.main_clauses_count,
            "annexAControlsCount": self.annex_a_controls_count,
            "requiredCategoriesCount": self.required_categories_count,
        }


def _as_group(group: Union[CategoryGroup, str]) -> CategoryGroup:
    return group if isinstance(group, CategoryGroup) else CategoryGroup(group)


class TemplateService:
    """
    Service for template retrieval, category management and selection
    validation.

    Lookups on unknown template or category ids return ``None`` or an empty
    list; validation failures are reported in the returned result.
    """

    def __init__(self, catalog: Optional[TemplateCatalog] = None):
        """
        Initialize the template service.

        Args:
            catalog: Template catalog to serve. Defaults to the built-in
                     catalog.
        """
        self._catalog = catalog if catalog is not None else default_catalog()

    @property
    def catalog(self) -> TemplateCatalog:
        return self._catalog

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_available_templates(self) -> List[WorkpaperTemplateDefinition]:
        """All templates in catalog declaration order."""
        return self._catalog.list()

    def get_template(self, template_id: str) -> Optional[WorkpaperTemplateDefinition]:
        return self._catalog.get(template_id)

    def get_template_categories(self, template_id: str) -> List[TemplateCategory]:
        """Categories of a template in declaration order, or ``[]`` if unknown."""
        template = self.get_template(template_id)
        if template is None:
            return []
        return list(template.categories)

    def get_category_by_id(
        self,
        template_id: str,
        category_id: str
    ) -> Optional[TemplateCategory]:
        for category in self.get_template_categories(template_id):
            if category.id == category_id:
                return category
        return None

    def get_categories_by_ids(
        self,
        template_id: str,
        category_ids: Iterable[str]
    ) -> List[TemplateCategory]:
        """
        Resolve category ids against a template.

        The result follows template order, not the order of ``category_ids``.
        Unknown ids are skipped.
        """
        wanted = set(category_ids)
        return [c for c in self.get_template_categories(template_id) if c.id in wanted]

    def get_categories_grouped(self, template_id: str) -> GroupedCategories:
        grouped = GroupedCategories()
        for category in self.get_template_categories(template_id):
            grouped.for_group(category.group).append(category)
        return grouped

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_category_selection(
        self,
        template_id: str,
        selected_categories: Optional[Iterable[str]]
    ) -> SelectionValidationResult:
        """
        Validate a category selection for a template.

        Checks, in order:
        1. The template exists. If not, this is the only error reported.
        2. At least one category is selected.
        3. Every selected id belongs to the template.
        4. Every required category is selected.

        An empty selection still goes through the required-category check, so
        a template with required categories reports both problems at once.

        Args:
            template_id: Template to validate against.
            selected_categories: Selected category ids, in any order.

        Returns:
            SelectionValidationResult with ``valid`` true iff there are no
            errors.
        """
        template = self.get_template(template_id)
        if template is None:
            return SelectionValidationResult(
                valid=False,
                errors=[f"Template with ID '{template_id}' not found"],
            )

        selected = list(selected_categories or [])
        errors: List[str] = []

        if not selected:
            errors.append("At least one category must be selected")

        available = set(template.category_ids)
        invalid = [category_id for category_id in selected if category_id not in available]
        if invalid:
            errors.append(f"Invalid category IDs: {', '.join(invalid)}")

        chosen = set(selected)
        missing = [c for c in template.required_categories if c.id not in chosen]
        if missing:
            names = ", ".join(c.name or c.id for c in missing)
            errors.append(f"Required categories must be selected: {names}")

        return SelectionValidationResult(valid=not errors, errors=errors)

    # =========================================================================
    # Summaries and search
    # =========================================================================

    def get_template_summary(self, template_id: str) -> Optional[TemplateSummary]:
        template = self.get_template(template_id)
        if template is None:
            return None

        grouped = self.get_categories_grouped(template_id)
        return TemplateSummary(
            id=template.id,
            name=template.name,
            description=template.description,
            total_categories=len(template.categories),
            main_clauses_count=len(grouped.main_clauses),
            annex_a_controls_count=len(grouped.annex_a_controls),
            required_categories_count=len(template.required_categories),
        )

    def search_categories(self, template_id: str, search_term: str) -> List[TemplateCategory]:
        """
        Case-insensitive search over category name, display name,
        description and clause numbers.
        """
        term = search_term.lower()

        def matches(category: TemplateCategory) -> bool:
            return (
                term in category.name.lower()
                or term in category.display_name.lower()
                or (category.description is not None and term in category.description.lower())
                or any(term in clause.lower() for clause in category.clauses)
            )

        return [c for c in self.get_template_categories(template_id) if matches(c)]

    def get_recommended_categories(self, template_id: str) -> List[str]:
        """
        Recommended starting selection for a template.

        For ISO 27001:2022 this is every main clause. Other templates
        recommend their required categories.
        """
        template = self.get_template(template_id)
        if template is None:
            return []

        if template_id == ISO27001_2022_TEMPLATE_ID:
            return [c.id for c in template.categories if c.group is CategoryGroup.MAIN_CLAUSES]

        return [c.id for c in template.required_categories]

    def get_category_count_by_group(
        self,
        template_id: str,
        group: Union[CategoryGroup, str]
    ) -> int:
        group = _as_group(group)
        return sum(1 for c in self.get_template_categories(template_id) if c.group is group)

    def has_required_categories(self, template_id: str) -> bool:
        return any(c.is_required for c in self.get_template_categories(template_id))

    def get_iso27001_template(self) -> WorkpaperTemplateDefinition:
        """The ISO 27001:2022 template as registered, else the built-in one."""
        return self.get_template(ISO27001_2022_TEMPLATE_ID) or ISO27001_2022_TEMPLATE

    @staticmethod
    def get_group_display_name(group: Union[CategoryGroup, str]) -> str:
        return get_group_display_name(group)


def format_category_display_name(category: TemplateCategory) -> str:
    """Display name, else ``<name> (<clause range or clause list>)``."""
    if category.display_name:
        return category.display_name
    clauses = category.clause_range or ", ".join(category.clauses)
    return f"{category.name} ({clauses})"


def get_category_clause_display(category: TemplateCategory) -> str:
    """Short clause label: the clause range, a short list, or ``first-last``."""
    if category.clause_range:
        return category.clause_range
    if len(category.clauses) <= 3:
        return ", ".join(category.clauses)
    return f"{category.clauses[0]}-{category.clauses[-1]}"


def get_group_display_name(group: Union[CategoryGroup, str]) -> str:
    return _as_group(group).display_name
