"""Compliance catalog data models.

Clauses, template categories and template definitions are loaded once and
never mutated afterwards, so they are frozen dataclasses holding tuples.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .enums import CategoryGroup, ClauseKind


@dataclass(frozen=True)
class Clause:
    """
    A numbered requirement of a compliance standard.

    Clauses form a tree through ``parent``; top-level clauses have no parent.
    """
    id: str
    number: str
    title: str
    description: str
    kind: ClauseKind
    parent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "description": self.description,
            "category": self.kind.value,
        }
        if self.parent is not None:
            data["parent"] = self.parent
        return data


@dataclass(frozen=True)
class TemplateCategory:
    """
    A selectable unit of audit scope within a workpaper template.

    Each selected category becomes exactly one workpaper, pre-filled with
    the category's objectives, scope and audit procedure.
    """
    id: str
    name: str
    display_name: str
    group: CategoryGroup
    clauses: Tuple[str, ...]
    is_required: bool
    objectives: str
    scope: str
    audit_procedure: str
    description: Optional[str] = None
    clause_range: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "group": self.group.value,
            "clauses": list(self.clauses),
            "clauseRange": self.clause_range,
            "isRequired": self.is_required,
            "description": self.description,
            "scope": self.scope,
            "objectives": self.objectives,
            "auditProcedure": self.audit_procedure,
        }


@dataclass(frozen=True)
class WorkpaperTemplateDefinition:
    """Named, versioned bundle of template categories."""
    id: str
    name: str
    description: str
    version: Optional[str] = None
    categories: Tuple[TemplateCategory, ...] = field(default_factory=tuple)

    @property
    def category_ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.categories)

    @property
    def required_categories(self) -> Tuple[TemplateCategory, ...]:
        return tuple(c for c in self.categories if c.is_required)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "categories": [c.to_dict() for c in self.categories],
        }


@dataclass(frozen=True)
class TickMark:
    """Coded annotation (A-Z) denoting a specific audit test."""
    code: str
    description: str
    category: str
