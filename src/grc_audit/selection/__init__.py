"""Interactive category selection for audit plans."""

from .category_selector import CategorySelector

__all__ = ["CategorySelector"]
