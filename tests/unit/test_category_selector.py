"""Unit tests for the category selector."""

import pytest

from grc_audit.catalog import TemplateCatalog
from grc_audit.models import CategoryGroup, TemplateCategory, WorkpaperTemplateDefinition
from grc_audit.selection import CategorySelector
from grc_audit.services import TemplateService


def _category(id, name, group=CategoryGroup.MAIN_CLAUSES, is_required=False):
    return TemplateCategory(
        id=id,
        name=name,
        display_name=name,
        group=group,
        clauses=("1.1",),
        is_required=is_required,
        objectives="objectives",
        scope="scope",
        audit_procedure="procedure",
    )


class ChangeRecorder:
    """Owner of the selection: stores every emitted selection."""

    def __init__(self):
        self.calls = []

    def __call__(self, selection):
        self.calls.append(selection)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def service():
    template = WorkpaperTemplateDefinition(
        id="tpl",
        name="Template",
        description="Selector test template",
        categories=(
            _category("req", "Required", is_required=True),
            _category("a", "Alpha"),
            _category("b", "Bravo"),
            _category("x", "Annex", group=CategoryGroup.ANNEX_A_CONTROLS),
        ),
    )
    return TemplateService(TemplateCatalog([template]))


@pytest.fixture
def recorder():
    return ChangeRecorder()


class TestToggle:
    """Tests for toggling single categories."""

    def test_toggle_appends_unselected(self, service, recorder):
        """Test selecting a category appends it to the selection."""
        selector = CategorySelector("tpl", ["req"], recorder, service=service)

        selector.toggle("b")

        assert recorder.last == ["req", "b"]
        assert selector.selected == ["req", "b"]

    def test_toggle_removes_selected_preserving_order(self, service, recorder):
        """Test deselecting keeps the order of the remaining ids."""
        selector = CategorySelector("tpl", ["a", "req", "b"], recorder, service=service)

        selector.toggle("a")

        assert recorder.last == ["req", "b"]

    def test_selected_required_cannot_be_removed(self, service, recorder):
        """Test toggling a selected required category is a no-op."""
        selector = CategorySelector("tpl", ["req", "a"], recorder, service=service)

        selector.toggle("req")

        assert recorder.calls == []
        assert selector.selected == ["req", "a"]
        assert selector.is_locked("req")

    def test_unselected_required_can_be_added(self, service, recorder):
        """Test a required category that is not yet selected can be selected."""
        selector = CategorySelector("tpl", [], recorder, service=service)

        assert not selector.is_locked("req")
        selector.toggle("req")

        assert recorder.last == ["req"]

    def test_unknown_category_is_ignored(self, service, recorder):
        """Test toggling an id outside the template does nothing."""
        selector = CategorySelector("tpl", ["a"], recorder, service=service)

        selector.toggle("missing")

        assert recorder.calls == []
        assert selector.selected == ["a"]

    def test_disabled_selector_ignores_toggles(self, service, recorder):
        """Test a disabled selector emits nothing."""
        selector = CategorySelector("tpl", [], recorder, service=service, disabled=True)

        selector.toggle("a")
        selector.toggle_select_all()
        selector.select_recommended()

        assert recorder.calls == []

    def test_reenabled_selector_accepts_toggles(self, service, recorder):
        """Test toggles resume after the selector is enabled again."""
        selector = CategorySelector("tpl", [], recorder, service=service, disabled=True)

        selector.set_disabled(False)
        selector.toggle("a")

        assert recorder.last == ["a"]


class TestSelectAll:
    """Tests for select-all and recommended selection."""

    def test_select_all_from_partial(self, service, recorder):
        """Test select-all selects every category in template order."""
        selector = CategorySelector("tpl", ["b"], recorder, service=service)

        selector.toggle_select_all()

        assert recorder.last == ["req", "a", "b", "x"]
        assert selector.is_all_selected

    def test_select_all_when_all_selected_keeps_required(self, service, recorder):
        """Test toggling select-all from a full selection leaves the required ids."""
        selector = CategorySelector("tpl", ["req", "a", "b", "x"], recorder, service=service)

        selector.toggle_select_all()

        assert recorder.last == ["req"]

    def test_select_all_twice_round_trip(self, service, recorder):
        """Test select-all twice lands on the required categories."""
        selector = CategorySelector("tpl", ["a"], recorder, service=service)

        selector.toggle_select_all()
        selector.toggle_select_all()

        assert recorder.calls == [["req", "a", "b", "x"], ["req"]]

    def test_select_recommended_replaces_selection(self, service, recorder):
        """Test recommended selection replaces the current one."""
        selector = CategorySelector("tpl", ["a", "b"], recorder, service=service)

        selector.select_recommended()

        assert recorder.last == ["req"]

    def test_recommended_on_builtin_template(self, recorder):
        """Test the built-in template recommends its main clauses."""
        selector = CategorySelector("iso27001-2022", [], recorder)

        selector.select_recommended()

        assert len(recorder.last) == 7
        assert recorder.last[0] == "context-organisation"


class TestPresentationState:
    """Tests for counts, grouping and expansion state."""

    def test_counts(self, service, recorder):
        """Test selected and total counts."""
        selector = CategorySelector("tpl", ["a", "x"], recorder, service=service)

        assert selector.selected_count == 2
        assert selector.total_count == 4
        assert not selector.is_all_selected
        assert selector.selected_count_in_group(CategoryGroup.MAIN_CLAUSES) == 1
        assert selector.selected_count_in_group(CategoryGroup.ANNEX_A_CONTROLS) == 1

    def test_set_selection_replaces_state(self, service, recorder):
        """Test the owner can push a stored selection back in."""
        selector = CategorySelector("tpl", [], recorder, service=service)

        selector.set_selection(["b"])

        assert selector.is_selected("b")
        assert not selector.is_selected("a")
        assert recorder.calls == []

    def test_duplicate_ids_are_collapsed(self, service, recorder):
        """Test repeated ids count once, so a partial selection is never all-selected."""
        selector = CategorySelector("tpl", ["a", "a", "b"], recorder, service=service)

        selector.set_selection(["req", "a", "a", "b"])

        assert selector.selected == ["req", "a", "b"]
        assert selector.selected_count == 3
        assert not selector.is_all_selected

    def test_groups_start_expanded(self, service, recorder):
        """Test every group is expanded initially and can be collapsed."""
        selector = CategorySelector("tpl", [], recorder, service=service)

        assert selector.is_group_expanded(CategoryGroup.MAIN_CLAUSES)
        assert selector.is_group_expanded(CategoryGroup.ANNEX_A_CONTROLS)

        selector.toggle_group_expanded(CategoryGroup.ANNEX_A_CONTROLS)
        assert not selector.is_group_expanded(CategoryGroup.ANNEX_A_CONTROLS)

        selector.toggle_group_expanded(CategoryGroup.ANNEX_A_CONTROLS)
        assert selector.is_group_expanded(CategoryGroup.ANNEX_A_CONTROLS)

    def test_unknown_template_has_no_categories(self, recorder):
        """Test a selector over an unknown template is empty."""
        selector = CategorySelector("nonexistent", [], recorder)

        assert selector.total_count == 0
        assert not selector.is_all_selected
        selector.toggle("a")
        assert recorder.calls == []

    def test_grouped_view(self, service, recorder):
        """Test the grouped view partitions the template's categories."""
        grouped = CategorySelector("tpl", [], recorder, service=service).grouped()

        assert [c.id for c in grouped.main_clauses] == ["req", "a", "b"]
        assert [c.id for c in grouped.annex_a_controls] == ["x"]


class TestRequiredContextScenario:
    """Selector over an ISO template whose context category is required."""

    @pytest.fixture
    def iso_service(self):
        template = WorkpaperTemplateDefinition(
            id="iso27001-2022",
            name="ISO 27001:2022",
            description="",
            categories=(
                _category("ctx-4", "Context of the Organization", is_required=True),
                _category("leadership-5", "Leadership"),
            ),
        )
        return TemplateService(TemplateCatalog([template]))

    def test_required_category_cannot_be_toggled_off(self, iso_service, recorder):
        """Test toggling the selected required category leaves the selection alone."""
        selector = CategorySelector("iso27001-2022", ["ctx-4"], recorder, service=iso_service)

        selector.toggle("ctx-4")

        assert recorder.calls == []
        assert selector.selected == ["ctx-4"]
        assert iso_service.validate_category_selection("iso27001-2022", selector.selected).valid
