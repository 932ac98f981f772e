"""
Lifecycle Toolkit - uniform soft delete lifecycle management.

Lets an operator list, restore and permanently purge soft-deleted records
across many entity collections (products, users, categories, brands, ...)
through one API instead of one bespoke endpoint per entity type.

Key Features
------------
* **Closed Registry**: Entity names resolve only to accessors enumerated at startup
* **Uniform Accessors**: One soft delete capability interface per collection
* **Bulk Operations**: Batch restore/purge with skip-don't-fail semantics
* **Audit Attribution**: Explicit principal stamped on every soft delete
* **Pagination**: Normalized, clamped paging with stable ordering

Quick Start
-----------
>>> from lifecycle_toolkit import LifecycleService, Principal
>>> from lifecycle_toolkit.catalog import build_default_registry, create_session_factory, init_database
>>>
>>> engine = await init_database("sqlite+aiosqlite:///lifecycle.db")
>>> service = LifecycleService(build_default_registry(create_session_factory(engine)))
>>>
>>> page = await service.list_deleted("products", page=1, size=10)
>>> result = await service.bulk_restore("products", ids, actor=Principal("u1", "a@b.c"))
"""

__version__ = "1.0.0"

from .access_control import Principal
from .config import LifecycleConfig, configure, get_config, set_config
from .soft_delete import (
    ConflictError,
    EntityRegistry,
    InternalError,
    LifecycleError,
    LifecycleService,
    NotFoundError,
    RegistryEntry,
    SoftDeletableAccessor,
    SoftDeleteMixin,
    SQLAlchemyAccessor,
    UnknownEntityError,
    ValidationError,
)

__all__ = [
    # Service
    "LifecycleService",
    # Registry and storage
    "EntityRegistry",
    "RegistryEntry",
    "SoftDeletableAccessor",
    "SQLAlchemyAccessor",
    "SoftDeleteMixin",
    # Access control
    "Principal",
    # Configuration
    "LifecycleConfig",
    "get_config",
    "set_config",
    "configure",
    # Exceptions
    "LifecycleError",
    "UnknownEntityError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
]
