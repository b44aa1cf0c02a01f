"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from omni.domain.enums import AccountRole, AccountStatus, ProductStatus
from omni.domain.exceptions import (
    ConstraintViolationException,
    OmniException,
    ResourceNotFoundException,
    ValidationException,
)

__all__ = [
    "AccountRole",
    "AccountStatus",
    "ConstraintViolationException",
    "OmniException",
    "ProductStatus",
    "ResourceNotFoundException",
    "ValidationException",
]
