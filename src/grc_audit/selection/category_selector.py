"""Category selection state machine.

The selector is controlled: it never owns the selection. Each transition
computes the next full selection from the one it was handed and reports it
through ``on_change``; the owner stores it and passes it back in with
``set_selection``.
"""

import logging
from typing import Callable, Iterable, List, Optional, Set

from ..models.catalog import TemplateCategory
from ..models.enums import CategoryGroup
from ..services.template_service import GroupedCategories, TemplateService


logger = logging.getLogger(__name__)

SelectionCallback = Callable[[List[str]], None]


class CategorySelector:
    """
    Multi-select over one template's categories.

    Required categories that are already selected cannot be deselected. A
    disabled selector ignores every transition.
    """

    def __init__(
        self,
        template_id: str,
        selected: Optional[Iterable[str]],
        on_change: SelectionCallback,
        service: Optional[TemplateService] = None,
        disabled: bool = False,
    ):
        """
        Initialize the selector.

        Args:
            template_id: Template whose categories are offered.
            selected: Current selection, owned by the caller.
            on_change: Receives the complete new selection after each
                       effective transition.
            service: Template service to resolve categories with.
            disabled: Start in the disabled state.
        """
        self._service = service or TemplateService()
        self._template_id = template_id
        self._categories: List[TemplateCategory] = self._service.get_template_categories(template_id)
        self._selected: List[str] = list(dict.fromkeys(selected or []))
        self._on_change = on_change
        self._disabled = disabled
        self._expanded_groups: Set[CategoryGroup] = set(CategoryGroup)

    @property
    def template_id(self) -> str:
        return self._template_id

    @property
    def categories(self) -> List[TemplateCategory]:
        return list(self._categories)

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    @property
    def total_count(self) -> int:
        return len(self._categories)

    @property
    def is_all_selected(self) -> bool:
        return bool(self._categories) and len(self._selected) == len(self._categories)

    def set_selection(self, selected: Iterable[str]) -> None:
        """Accept the selection as stored by the owner."""
        self._selected = list(dict.fromkeys(selected))

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = disabled

    def grouped(self) -> GroupedCategories:
        return self._service.get_categories_grouped(self._template_id)

    def selected_count_in_group(self, group: CategoryGroup) -> int:
        chosen = set(self._selected)
        return sum(1 for c in self.grouped().for_group(group) if c.id in chosen)

    def is_selected(self, category_id: str) -> bool:
        return category_id in self._selected

    def is_locked(self, category_id: str) -> bool:
        """True if the category is required and selected, so it cannot be removed."""
        category = self._find(category_id)
        return category is not None and category.is_required and self.is_selected(category_id)

    # =========================================================================
    # Transitions
    # =========================================================================

    def toggle(self, category_id: str) -> None:
        """
        Select or deselect one category.

        Deselecting keeps the order of the remaining ids; selecting appends.
        Unknown ids and locked required categories are ignored.
        """
        if self._disabled:
            return

        category = self._find(category_id)
        if category is None:
            logger.warning(f"Ignoring toggle of unknown category {category_id} in {self._template_id}")
            return

        if category.is_required and category_id in self._selected:
            return

        if category_id in self._selected:
            selection = [c for c in self._selected if c != category_id]
        else:
            selection = self._selected + [category_id]

        self._emit(selection)

    def toggle_select_all(self) -> None:
        """Select every category, or fall back to the required ones if all are selected."""
        if self._disabled:
            return

        if self.is_all_selected:
            selection = [c.id for c in self._categories if c.is_required]
        else:
            selection = [c.id for c in self._categories]

        self._emit(selection)

    def select_recommended(self) -> None:
        """Replace the selection with the template's recommended categories."""
        if self._disabled:
            return

        self._emit(self._service.get_recommended_categories(self._template_id))

    # =========================================================================
    # Presentation state
    # =========================================================================

    def is_group_expanded(self, group: CategoryGroup) -> bool:
        return group in self._expanded_groups

    def toggle_group_expanded(self, group: CategoryGroup) -> None:
        if group in self._expanded_groups:
            self._expanded_groups.discard(group)
        else:
            self._expanded_groups.add(group)

    def _find(self, category_id: str) -> Optional[TemplateCategory]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def _emit(self, selection: List[str]) -> None:
        self._selected = list(selection)
        self._on_change(list(selection))
