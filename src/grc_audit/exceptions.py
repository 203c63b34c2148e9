"""Exceptions raised by the GRC Audit Workpapers system."""

from typing import Any, Dict, Optional


class GrcAuditError(Exception):
    """Base exception for all system errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class EntityNotFoundError(GrcAuditError):
    """Raised when an update or delete targets a record that does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidTransitionError(GrcAuditError):
    """Raised when a status change is not allowed from the current state."""

    def __init__(self, entity_type: str, current: str, requested: str):
        super().__init__(
            f"Cannot change {entity_type} status from '{current}' to '{requested}'",
            details={"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested
