"""
Catalog error taxonomy.

Every failure of a catalog operation reaches the caller as one of these:

    ValidationError  caller input is malformed or out of range; fix the input
    NotFoundError    the referenced id does not exist
    StorageError     the object store or the catalog database failed; the whole
                     operation may be retried from scratch

Usage:
    from catalog.core.exceptions import NotFoundError

    if resource is None:
        raise NotFoundError("resource", resource_id)
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """Base exception for all catalog errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(CatalogError):
    """Caller supplied malformed or out-of-range input"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(CatalogError):
    """Referenced entity does not exist"""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity.capitalize()} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id}
        )
        self.entity = entity
        self.entity_id = entity_id


class StorageError(CatalogError):
    """Object store or catalog store failure"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="STORAGE_ERROR", details=details)
