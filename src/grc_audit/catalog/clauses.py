"""ISO/IEC 27001:2022 clause catalog.

The catalog is a flat, ordered list of clauses that forms a tree through
parent references: clauses 4-10 with their sub-clauses, and an Annex A root
holding a sample of key controls.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from ..config.models import ValidationResult
from ..models.catalog import Clause
from ..models.enums import ClauseKind

_ORG = ClauseKind.ORGANIZATIONAL
_TECH = ClauseKind.TECHNICAL

# (id, number, title, description, kind, parent)
_ISO27001_CLAUSE_ROWS = [
    ("clause-4", "4", "Context of the Organization",
     "Understanding the organization and its context", _ORG, None),
    ("clause-4.1", "4.1", "Understanding the organization and its context",
     "External and internal issues relevant to ISMS", _ORG, "clause-4"),
    ("clause-4.2", "4.2", "Understanding the needs and expectations of interested parties",
     "Identify stakeholders and their requirements", _ORG, "clause-4"),
    ("clause-4.3", "4.3", "Determining the scope of the ISMS",
     "Define boundaries and applicability of ISMS", _ORG, "clause-4"),
    ("clause-4.4", "4.4", "Information security management system",
     "Establish, implement, maintain and continually improve ISMS", _ORG, "clause-4"),

    ("clause-5", "5", "Leadership", "Leadership and commitment to ISMS", _ORG, None),
    ("clause-5.1", "5.1", "Leadership and commitment",
     "Top management demonstrates leadership and commitment", _ORG, "clause-5"),
    ("clause-5.2", "5.2", "Policy", "Information security policy establishment", _ORG, "clause-5"),
    ("clause-5.3", "5.3", "Organizational roles, responsibilities and authorities",
     "Assign roles and responsibilities for ISMS", _ORG, "clause-5"),

    ("clause-6", "6", "Planning", "Actions to address risks and opportunities", _ORG, None),
    ("clause-6.1", "6.1", "Actions to address risks and opportunities",
     "Risk assessment and treatment planning", _ORG, "clause-6"),
    ("clause-6.2", "6.2", "Information security objectives and planning to achieve them",
     "Define and plan security objectives", _ORG, "clause-6"),
    ("clause-6.3", "6.3", "Planning of changes",
     "Plan changes to ISMS in a controlled manner", _ORG, "clause-6"),

    ("clause-7", "7", "Support", "Resources, competence, awareness, communication", _ORG, None),
    ("clause-7.1", "7.1", "Resources", "Determine and provide resources for ISMS", _ORG, "clause-7"),
    ("clause-7.2", "7.2", "Competence", "Ensure competence of personnel", _ORG, "clause-7"),
    ("clause-7.3", "7.3", "Awareness", "Personnel awareness of information security", _ORG, "clause-7"),
    ("clause-7.4", "7.4", "Communication",
     "Internal and external communication about ISMS", _ORG, "clause-7"),
    ("clause-7.5", "7.5", "Documented information",
     "ISMS documentation and records control", _ORG, "clause-7"),

    ("clause-8", "8", "Operation", "Operational planning and control", _ORG, None),
    ("clause-8.1", "8.1", "Operational planning and control",
     "Plan, implement and control security processes", _ORG, "clause-8"),
    ("clause-8.2", "8.2", "Information security risk assessment",
     "Perform risk assessments at planned intervals", _ORG, "clause-8"),
    ("clause-8.3", "8.3", "Information security risk treatment",
     "Implement risk treatment plans", _ORG, "clause-8"),

    ("clause-9", "9", "Performance Evaluation",
     "Monitoring, measurement, analysis and evaluation", _ORG, None),
    ("clause-9.1", "9.1", "Monitoring, measurement, analysis and evaluation",
     "Evaluate ISMS performance and effectiveness", _ORG, "clause-9"),
    ("clause-9.2", "9.2", "Internal audit", "Conduct internal ISMS audits", _ORG, "clause-9"),
    ("clause-9.3", "9.3", "Management review", "Top management reviews ISMS", _ORG, "clause-9"),

    ("clause-10", "10", "Improvement", "Nonconformity and continual improvement", _ORG, None),
    ("clause-10.1", "10.1", "Continual improvement",
     "Continually improve ISMS suitability, adequacy and effectiveness", _ORG, "clause-10"),
    ("clause-10.2", "10.2", "Nonconformity and corrective action",
     "Handle nonconformities and take corrective action", _ORG, "clause-10"),

    ("annex-a", "A", "Annex A - Information Security Controls",
     "Reference control objectives and controls", _TECH, None),
    ("clause-a.5.1", "A.5.1", "Policies for information security",
     "Management direction for information security", _ORG, "annex-a"),
    ("clause-a.5.2", "A.5.2", "Information security roles and responsibilities",
     "Allocation of information security responsibilities", _ORG, "annex-a"),
    ("clause-a.8.1", "A.8.1", "User endpoint devices",
     "Security of devices used by personnel", _TECH, "annex-a"),
    ("clause-a.8.2", "A.8.2", "Privileged access rights",
     "Allocation and use of privileged access rights", _TECH, "annex-a"),
    ("clause-a.8.3", "A.8.3", "Information access restriction",
     "Restrict access to information and information processing facilities", _TECH, "annex-a"),
    ("clause-a.8.5", "A.8.5", "Secure authentication",
     "Secure authentication technologies and procedures", _TECH, "annex-a"),
]

ISO27001_CLAUSES: Tuple[Clause, ...] = tuple(
    Clause(id=row[0], number=row[1], title=row[2], description=row[3], kind=row[4], parent=row[5])
    for row in _ISO27001_CLAUSE_ROWS
)


class ClauseCatalog:
    """
    Read-only lookup over an ordered collection of clauses.

    Lookups on unknown ids or numbers return ``None`` or an empty list.
    """

    def __init__(self, clauses: Iterable[Clause] = ISO27001_CLAUSES):
        self._clauses: Tuple[Clause, ...] = tuple(clauses)
        self._by_id: Dict[str, Clause] = {c.id: c for c in self._clauses}
        self._by_number: Dict[str, Clause] = {}
        for clause in self._clauses:
            self._by_number.setdefault(clause.number, clause)

    def __len__(self) -> int:
        return len(self._clauses)

    def __iter__(self):
        return iter(self._clauses)

    @property
    def clauses(self) -> Tuple[Clause, ...]:
        return self._clauses

    def get_clause_by_id(self, clause_id: str) -> Optional[Clause]:
        return self._by_id.get(clause_id)

    def get_clause_by_number(self, number: str) -> Optional[Clause]:
        return self._by_number.get(number)

    def get_top_level_clauses(self) -> List[Clause]:
        return [c for c in self._clauses if c.parent is None]

    def get_child_clauses(self, parent_id: str) -> List[Clause]:
        return [c for c in self._clauses if c.parent == parent_id]

    def get_all_clause_numbers(self) -> List[str]:
        return [c.number for c in self._clauses]

    def get_clause_title(self, number: str) -> str:
        """Title for a clause number, falling back to ``Clause <number>``."""
        clause = self.get_clause_by_number(number)
        return clause.title if clause else f"Clause {number}"

    def validate(self) -> ValidationResult:
        """
        Check the catalog's structural invariants.

        Clause ids and numbers must be unique and every parent reference
        must resolve to a clause in the catalog.
        """
        result = ValidationResult(is_valid=True)

        ids = [c.id for c in self._clauses]
        duplicate_ids = sorted({i for i in ids if ids.count(i) > 1})
        if duplicate_ids:
            result.add_error(f"Duplicate clause IDs found: {', '.join(duplicate_ids)}")

        numbers = [c.number for c in self._clauses]
        duplicate_numbers = sorted({n for n in numbers if numbers.count(n) > 1})
        if duplicate_numbers:
            result.add_error(f"Duplicate clause numbers found: {', '.join(duplicate_numbers)}")

        for clause in self._clauses:
            if clause.parent is not None and clause.parent not in self._by_id:
                result.add_error(
                    f"Clause '{clause.id}' references unknown parent '{clause.parent}'"
                )

        return result


DEFAULT_CLAUSE_CATALOG = ClauseCatalog()
