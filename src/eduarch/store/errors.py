"""Domain store exceptions.

Three error kinds, all local to the operation that raised them:
- ValidationError: malformed input or invariant violation (400)
- NotFoundError: addressed id does not resolve (404)
- ConflictError: uniqueness or delete-restriction violation (409)
"""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base class for domain store errors."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {"detail": str(self)}


class ValidationError(StoreError):
    """Raised when input is malformed or an invariant would be violated."""

    def __init__(self, field: str, rule: str, message: str | None = None):
        self.field = field
        self.rule = rule
        super().__init__(message or f"{field}: {rule}")

    def to_dict(self) -> dict[str, Any]:
        return {"detail": str(self), "field": self.field, "rule": self.rule}


class NotFoundError(StoreError):
    """Raised when an entity id does not resolve."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")

    def to_dict(self) -> dict[str, Any]:
        return {"detail": str(self), "entity": self.entity, "id": self.entity_id}


class ConflictError(StoreError):
    """Raised on uniqueness violations and restricted deletes."""

    def __init__(
        self,
        rule: str,
        message: str | None = None,
        dependents: dict[str, int] | None = None,
    ):
        self.rule = rule
        self.dependents = dependents or {}
        super().__init__(message or rule)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"detail": str(self), "rule": self.rule}
        if self.dependents:
            result["dependents"] = self.dependents
        return result
