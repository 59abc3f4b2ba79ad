from .base import (  # noqa: F401
    ConflictError,
    InternalServerError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from .category import (  # noqa: F401
    CategoryAlreadyExistsError,
    CategoryCycleError,
    CategoryHasChildrenError,
    CategoryHasProductsError,
    CategoryNotFoundError,
    CategorySelfParentError,
    CategoryVersionConflictError,
    InvalidReassignmentTargetError,
)
from .database import DatabaseError  # noqa: F401

__all__ = [
    "ConflictError",
    "InternalServerError",
    "InvalidOperationError",
    "NotFoundError",
    "ValidationError",
    "CategoryAlreadyExistsError",
    "CategoryCycleError",
    "CategoryHasChildrenError",
    "CategoryHasProductsError",
    "CategoryNotFoundError",
    "CategorySelfParentError",
    "CategoryVersionConflictError",
    "InvalidReassignmentTargetError",
    "DatabaseError",
]
