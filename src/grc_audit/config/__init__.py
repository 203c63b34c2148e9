"""Configuration management for the GRC Audit Workpapers system."""

from .config_manager import ConfigurationManager
from .models import CatalogConfiguration, ConfigurationError, ValidationResult
from .settings import get_template_config_dir

__all__ = [
    "CatalogConfiguration",
    "ConfigurationError",
    "ConfigurationManager",
    "ValidationResult",
    "get_template_config_dir",
]
