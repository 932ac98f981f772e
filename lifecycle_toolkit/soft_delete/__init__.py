"""
Soft Delete Module - generic soft delete lifecycle management.

Provides a closed entity registry, storage accessors, pagination and the
lifecycle service used to list, restore and purge soft-deleted records across
entity collections.
"""

from .accessors import SoftDeletableAccessor, SQLAlchemyAccessor
from .audit import AuditAttribution
from .exceptions import (
    ConflictError,
    InternalError,
    LifecycleError,
    NotFoundError,
    UnknownEntityError,
    ValidationError,
)
from .mixins import SoftDeleteMixin, register_soft_delete_listeners
from .models import (
    BulkPurgeResult,
    BulkRestoreResult,
    PageMeta,
    PageResult,
    PageWindow,
    PurgeResult,
    RepairResult,
    RestoreResult,
    SoftDeleteResult,
    is_valid_record_id,
    new_record_id,
)
from .pagination import PaginationPolicy
from .registry import EntityRegistry, RegistryEntry, get_registry, install_registry
from .services import LifecycleService

__all__ = [
    # Registry
    "EntityRegistry",
    "RegistryEntry",
    "install_registry",
    "get_registry",
    # Accessors
    "SoftDeletableAccessor",
    "SQLAlchemyAccessor",
    # Mixins
    "SoftDeleteMixin",
    "register_soft_delete_listeners",
    # Services
    "LifecycleService",
    "PaginationPolicy",
    "AuditAttribution",
    # Models
    "PageWindow",
    "PageMeta",
    "PageResult",
    "RestoreResult",
    "SoftDeleteResult",
    "PurgeResult",
    "BulkRestoreResult",
    "BulkPurgeResult",
    "RepairResult",
    "new_record_id",
    "is_valid_record_id",
    # Exceptions
    "LifecycleError",
    "UnknownEntityError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
]
