"""Exceptions for soft delete lifecycle operations."""

from typing import Any, Dict, Optional


class LifecycleError(Exception):
    """Base exception for lifecycle operations.

    Every error carries a stable ``kind`` so callers (and transports) can map
    it without string matching on the message.
    """

    kind = "lifecycle_error"

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation of the error."""
        return {
            "kind": self.kind,
            "message": self.message,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
        }


class UnknownEntityError(LifecycleError):
    """Raised when an entity name is not registered."""

    kind = "unknown_entity"

    def __init__(self, entity_type: Any):
        super().__init__(
            f"Entity type {entity_type!r} is not supported",
            entity_type=str(entity_type),
        )


class ValidationError(LifecycleError):
    """Raised for malformed input; ``details`` maps field name to problem."""

    kind = "validation_error"

    def __init__(self, field: str, problem: str, entity_type: Optional[str] = None):
        self.field = field
        super().__init__(
            f"Invalid {field}: {problem}",
            entity_type=entity_type,
            details={field: problem},
        )


class NotFoundError(LifecycleError):
    """Raised when a record does not exist in the state an operation needs."""

    kind = "not_found"

    def __init__(self, entity_type: str, entity_id: str, state: str = "deleted"):
        super().__init__(
            f"No {state} {entity_type} record with ID {entity_id}",
            entity_type=entity_type,
            entity_id=entity_id,
        )


class ConflictError(LifecycleError):
    """Raised when purging a record that has not been soft deleted."""

    kind = "conflict"

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(
            f"{entity_type} record {entity_id} is active and must be soft deleted "
            "before it can be permanently deleted",
            entity_type=entity_type,
            entity_id=entity_id,
        )


class InternalError(LifecycleError):
    """Raised when the underlying storage fails."""

    kind = "internal_error"
