"""Unit tests for the Configuration Manager."""

import json
import tempfile
from pathlib import Path

import pytest

from grc_audit.catalog import TemplateCatalog
from grc_audit.config import (
    CatalogConfiguration,
    ConfigurationError,
    ConfigurationManager,
    ValidationResult,
    get_template_config_dir,
)
from grc_audit.models import CategoryGroup, ClauseKind
from grc_audit.services import TemplateService


def _category(**overrides):
    data = {
        "id": "cc1",
        "name": "Control Environment",
        "group": "main-clauses",
        "clauses": ["CC1.1", "CC1.2"],
        "objectives": "Evaluate the control environment",
        "scope": "Board oversight and ethics",
        "auditProcedure": "1. Review charter\n2. Interview board",
    }
    data.update(overrides)
    return data


def _template(**overrides):
    data = {
        "id": "soc2",
        "name": "SOC 2",
        "description": "Trust services criteria",
        "categories": [
            _category(isRequired=True),
            _category(id="cc2", name="Communication", clauses=["CC2.1"]),
        ],
    }
    data.update(overrides)
    return data


class TestClauseLoading:
    """Tests for clause catalog configuration."""

    def test_load_clauses_from_dict(self):
        """Test loading clauses from a wrapped dictionary."""
        manager = ConfigurationManager()

        result = manager.load_clauses({
            "clauses": [
                {"id": "c-4", "number": "4", "title": "Context", "category": "organizational"},
                {"id": "c-4.1", "number": "4.1", "title": "Issues", "category": "organizational",
                 "parent": "c-4", "description": "Internal and external issues"},
            ]
        })

        assert result.is_valid
        assert manager.is_loaded
        assert len(manager.configuration.clauses) == 2
        assert manager.get_clause("c-4.1").parent == "c-4"
        assert manager.get_clause("c-4.1").kind is ClauseKind.ORGANIZATIONAL

    def test_load_clauses_from_list(self):
        """Test loading clauses from a plain list."""
        manager = ConfigurationManager()

        result = manager.load_clauses([
            {"id": "a-8.5", "number": "A.8.5", "title": "Secure authentication", "category": "technical"},
        ])

        assert result.is_valid
        assert manager.get_clause("a-8.5").kind is ClauseKind.TECHNICAL
        assert manager.get_clause("missing") is None

    def test_clause_missing_fields(self):
        """Test validation fails for missing required fields."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_clauses([{"id": "c-1", "number": "1"}])

        errors = exc_info.value.validation_result.errors
        assert "Clause [0]: Missing required field 'title'" in errors
        assert "Clause [0]: Missing required field 'category'" in errors
        assert not manager.is_loaded

    def test_clause_invalid_category(self):
        """Test an unknown clause kind is rejected."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_clauses([{"id": "c-1", "number": "1", "title": "One", "category": "legal"}])

        assert "'category' must be one of" in exc_info.value.validation_result.errors[0]

    def test_clause_duplicates_and_unknown_parent(self):
        """Test duplicate ids, duplicate numbers and dangling parents."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_clauses([
                {"id": "c-1", "number": "1", "title": "One", "category": "organizational"},
                {"id": "c-1", "number": "1", "title": "Again", "category": "organizational"},
                {"id": "c-2", "number": "2", "title": "Two", "category": "organizational",
                 "parent": "c-9"},
            ])

        errors = exc_info.value.validation_result.errors
        assert any("Duplicate clause IDs" in e for e in errors)
        assert any("Duplicate clause numbers" in e for e in errors)
        assert "Clause 'c-2' references unknown parent 'c-9'" in errors


class TestTemplateLoading:
    """Tests for workpaper template configuration."""

    def test_load_templates_from_dict(self):
        """Test loading a template with API-shaped category keys."""
        manager = ConfigurationManager()

        result = manager.load_templates({"templates": [_template()]})

        assert result.is_valid
        template = manager.get_template("soc2")
        assert template is not None
        assert template.category_ids == ("cc1", "cc2")
        first = template.categories[0]
        assert first.is_required is True
        assert first.display_name == "Control Environment"
        assert first.group is CategoryGroup.MAIN_CLAUSES
        assert first.audit_procedure.startswith("1. Review")
        assert template.categories[1].is_required is False

    def test_load_single_template_dict(self):
        """Test a bare template dictionary is accepted."""
        manager = ConfigurationManager()

        manager.load_templates(_template(id="single"))

        assert manager.get_template("single") is not None

    def test_category_missing_fields(self):
        """Test missing category fields are reported with their position."""
        manager = ConfigurationManager()
        broken = {"id": "cc1", "name": "Control Environment", "group": "main-clauses"}

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_templates([_template(categories=[broken])])

        errors = exc_info.value.validation_result.errors
        assert "Template [0] category [0]: Missing required field 'clauses'" in errors
        assert "Template [0] category [0]: Missing required field 'auditProcedure'" in errors

    def test_category_invalid_group(self):
        """Test an unknown group is rejected."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_templates([_template(categories=[_category(group="annex-b")])])

        assert "'group' must be one of" in exc_info.value.validation_result.errors[0]

    def test_is_required_must_be_boolean(self):
        """Test a non-boolean isRequired flag is rejected."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_templates([_template(categories=[_category(isRequired="yes")])])

        assert "'isRequired' must be a boolean" in exc_info.value.validation_result.errors[0]

    def test_duplicate_category_ids(self):
        """Test duplicate category ids inside one template are rejected."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_templates([_template(categories=[_category(), _category()])])

        assert "Duplicate category IDs" in exc_info.value.validation_result.errors[0]

    def test_duplicate_template_ids(self):
        """Test duplicate template ids are rejected."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError) as exc_info:
            manager.load_templates([_template(), _template()])

        assert "Duplicate template IDs" in exc_info.value.validation_result.errors[0]

    def test_template_without_categories_warns(self):
        """Test a template with no categories loads with a warning."""
        manager = ConfigurationManager()

        result = manager.load_templates([_template(categories=[])])

        assert result.is_valid
        assert result.warnings == ["Template [0]: template 'soc2' has no categories"]


class TestFileOperations:
    """Tests for file-based configuration."""

    def test_load_from_file(self):
        """Test loading templates from a JSON file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "templates.json"
            path.write_text(json.dumps({"templates": [_template()]}), encoding="utf-8")

            manager = ConfigurationManager()
            result = manager.load_templates(path)

        assert result.is_valid
        assert manager.get_template("soc2") is not None

    def test_missing_file(self):
        """Test a missing file raises ConfigurationError."""
        manager = ConfigurationManager()

        with pytest.raises(ConfigurationError, match="not found"):
            manager.load_templates("/nonexistent/templates.json")

    def test_invalid_json(self):
        """Test malformed JSON raises ConfigurationError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "clauses.json"
            path.write_text("{not json", encoding="utf-8")

            with pytest.raises(ConfigurationError, match="Invalid JSON"):
                ConfigurationManager().load_clauses(path)

    def test_save_and_reload_directory(self):
        """Test configuration saved to a directory loads back unchanged."""
        manager = ConfigurationManager()
        manager.load_clauses([
            {"id": "cc-1", "number": "CC1.1", "title": "Integrity", "category": "organizational"},
            {"id": "cc-2", "number": "CC1.2", "title": "Oversight", "category": "organizational"},
            {"id": "cc-3", "number": "CC2.1", "title": "Information", "category": "organizational"},
        ])
        manager.load_templates([_template()])

        with tempfile.TemporaryDirectory() as tmpdir:
            manager.save_to_directory(tmpdir)

            reloaded = ConfigurationManager()
            result = reloaded.load_from_directory(tmpdir)

        assert result.is_valid
        assert result.warnings == []
        assert reloaded.configuration.clauses == manager.configuration.clauses
        assert reloaded.get_template("soc2") == manager.get_template("soc2")

    def test_load_from_directory_collects_errors(self):
        """Test directory loading reports errors instead of raising."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "templates.json").write_text(
                json.dumps([_template(categories=[{"id": "x"}])]), encoding="utf-8"
            )

            result = ConfigurationManager().load_from_directory(tmpdir)

        assert not result.is_valid
        assert result.errors[0] == "Template loading failed: Template validation failed"

    def test_save_without_directory(self):
        """Test saving without any directory configured fails."""
        with pytest.raises(ConfigurationError):
            ConfigurationManager().save_to_directory()


class TestConfigurationValidation:
    """Tests for cross-checking templates against clauses."""

    def test_unknown_clause_references_warn(self):
        """Test categories referencing unknown clause numbers produce warnings."""
        manager = ConfigurationManager()
        manager.load_clauses([
            {"id": "cc-1", "number": "CC1.1", "title": "Integrity", "category": "organizational"},
        ])
        manager.load_templates([_template()])

        result = manager.validate_configuration()

        assert result.is_valid
        assert len(result.warnings) == 2
        assert "soc2/cc1" in result.warnings[0]

    def test_no_clauses_skips_cross_check(self):
        """Test nothing is checked without a loaded clause catalog."""
        manager = ConfigurationManager()
        manager.load_templates([_template()])

        assert manager.validate_configuration().warnings == []

    def test_validation_result_merge(self):
        """Test merging validation results combines messages."""
        first = ValidationResult(is_valid=True, warnings=["w"])
        second = ValidationResult(is_valid=True)
        second.add_error("e")

        merged = first.merge(second)

        assert not merged.is_valid
        assert merged.errors == ["e"]
        assert merged.warnings == ["w"]

    def test_reset_and_to_dict(self):
        """Test reset clears the loaded configuration."""
        manager = ConfigurationManager()
        manager.load_templates([_template()])

        exported = manager.to_dict()
        manager.reset()

        assert exported["templates"][0]["id"] == "soc2"
        assert manager.configuration == CatalogConfiguration()
        assert not manager.is_loaded


class TestCatalogFromConfiguration:
    """Tests for building a template catalog from loaded configuration."""

    def test_loaded_templates_follow_builtin(self):
        """Test configured templates are served after the built-in one."""
        manager = ConfigurationManager()
        manager.load_templates([_template()])

        service = TemplateService(TemplateCatalog.from_configuration(manager))

        assert [t.id for t in service.get_available_templates()] == ["iso27001-2022", "soc2"]
        assert service.get_recommended_categories("soc2") == ["cc1"]

    def test_without_builtin(self):
        """Test the built-in template can be left out."""
        manager = ConfigurationManager()
        manager.load_templates([_template()])

        catalog = TemplateCatalog.from_configuration(manager, include_builtin=False)

        assert len(catalog) == 1
        assert catalog.get("iso27001-2022") is None

    def test_builtin_id_collision_rejected(self):
        """Test a configured template cannot reuse the built-in id."""
        manager = ConfigurationManager()
        manager.load_templates([_template(id="iso27001-2022")])

        with pytest.raises(ConfigurationError):
            TemplateCatalog.from_configuration(manager)


class TestSettings:
    """Tests for environment settings."""

    def test_template_config_dir_unset(self, monkeypatch):
        """Test no directory is configured by default."""
        monkeypatch.delenv("GRC_TEMPLATE_CONFIG_DIR", raising=False)

        assert get_template_config_dir() is None

    def test_template_config_dir_set(self, monkeypatch, tmp_path):
        """Test the directory comes from the environment."""
        monkeypatch.setenv("GRC_TEMPLATE_CONFIG_DIR", str(tmp_path))

        assert get_template_config_dir() == tmp_path
