"""
Service layer for soft delete lifecycle operations.

Provides one uniform API to list, restore, soft delete and permanently purge
records across every registered entity collection.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from ..access_control import Principal
from ..config import LifecycleConfig, get_config
from .accessors import SoftDeletableAccessor
from .audit import AuditAttribution
from .exceptions import (
    ConflictError,
    InternalError,
    LifecycleError,
    NotFoundError,
    ValidationError,
)
from .models import (
    BulkPurgeResult,
    BulkRestoreResult,
    PageResult,
    PurgeResult,
    RepairResult,
    RestoreResult,
    SoftDeleteResult,
    is_valid_record_id,
)
from .pagination import PaginationPolicy
from .registry import EntityRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LifecycleService:
    """
    Service for managing soft-deleted records across entity collections.

    Holds no state between calls: every operation resolves its accessor
    through the registry, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        registry: EntityRegistry,
        config: Optional[LifecycleConfig] = None,
        audit_logger: Optional[Any] = None,
    ):
        """
        Initialize the lifecycle service.

        Args:
            registry: Closed registry of entity accessors
            config: Configuration, defaults to the global configuration
            audit_logger: Optional audit logging service with an async
                ``log_activity`` method
        """
        self.registry = registry
        self.config = config or get_config()
        self.audit_logger = audit_logger
        self.pagination = PaginationPolicy(
            default_size=self.config.default_page_size,
            max_size=self.config.max_page_size,
        )

    async def _call(
        self,
        entity_type: str,
        action: str,
        operation: Callable[[], Awaitable[T]],
        timeout: Optional[float] = None,
    ) -> T:
        """Run one accessor call under the operation timeout."""
        try:
            return await asyncio.wait_for(
                operation(), timeout or self.config.operation_timeout_seconds
            )
        except LifecycleError:
            raise
        except asyncio.TimeoutError as e:
            raise InternalError(
                f"Timed out during {action} on {entity_type}", entity_type=entity_type
            ) from e
        except Exception as e:
            logger.exception(f"Unexpected failure during {action} on {entity_type}")
            raise InternalError(
                f"{action.capitalize()} failed on {entity_type}", entity_type=entity_type
            ) from e

    async def _audit(
        self,
        activity_type: str,
        entity_type: str,
        entity_id: str,
        actor: Optional[Principal],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self.audit_logger:
            return

        try:
            await self.audit_logger.log_activity(
                user_id=AuditAttribution.actor_id(actor),
                activity_type=activity_type,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details or {},
            )
        except Exception as audit_error:
            # The mutation is already committed; report, never undo
            logger.error(f"Failed to create audit log: {audit_error}")

    @staticmethod
    def _require_id(entity_type: str, entity_id: Any) -> str:
        if not is_valid_record_id(entity_id):
            raise ValidationError(
                "id", f"{entity_id!r} is not a 24-character hex ID", entity_type
            )
        return entity_id.lower()

    @staticmethod
    def _prepare_ids(entity_type: str, ids: Iterable[Any]) -> Tuple[List[str], List[str]]:
        """Split ids into unique well-formed ids and malformed ones."""
        if ids is None or isinstance(ids, (str, bytes)):
            raise ValidationError("ids", "must be a collection of IDs", entity_type)

        try:
            # Hex is case-insensitive; stored ids are lowercase
            unique = list(
                dict.fromkeys(i.lower() if is_valid_record_id(i) else i for i in ids)
            )
        except TypeError:
            raise ValidationError("ids", "must be a collection of IDs", entity_type) from None
        if not unique:
            raise ValidationError("ids", "at least one ID is required", entity_type)

        valid = [i for i in unique if is_valid_record_id(i)]
        malformed = [str(i) for i in unique if not is_valid_record_id(i)]
        if not valid:
            raise ValidationError("ids", "no valid IDs supplied", entity_type)
        if malformed:
            logger.warning(f"Skipping {len(malformed)} malformed IDs for {entity_type}")

        return valid, malformed

    async def get_deleted_items(
        self, entity_name: str, page: Any = None, size: Any = None
    ) -> PageResult:
        """
        List soft-deleted records of one entity collection.

        Args:
            entity_name: Registered entity name
            page: Page number (1-based), defaults to 1
            size: Page size, defaults to the configured default

        Returns:
            Page of deleted records with pagination metadata

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Pagination input is not numeric
        """
        accessor = self.registry.resolve(entity_name)
        window = self.pagination.normalize(page, size)

        total = await self._call(entity_name, "count", accessor.count_deleted)
        items: List[Dict[str, Any]] = []
        # Pages past the end never reach storage
        if window.offset < total:
            items = await self._call(
                entity_name,
                "listing",
                lambda: accessor.find_deleted(window.offset, window.limit),
            )

        meta = self.pagination.build_meta(window.page, window.size, total)
        return PageResult(items=items, **meta.model_dump())

    async def restore_item(
        self, entity_name: str, entity_id: str, actor: Optional[Principal] = None
    ) -> RestoreResult:
        """
        Restore one soft-deleted record.

        Restoring does not depend on who deleted the record.

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Malformed ID
            NotFoundError: Record is not currently soft deleted
        """
        accessor = self.registry.resolve(entity_name)
        entity_id = self._require_id(entity_name, entity_id)

        item = await self._call(entity_name, "restore", lambda: accessor.restore(entity_id))
        logger.info(f"Restored {entity_name} {entity_id}")
        await self._audit("RESTORE", entity_name, entity_id, actor)

        return RestoreResult(message="Restored successfully", item=item)

    async def permanent_delete(
        self, entity_name: str, entity_id: str, actor: Optional[Principal] = None
    ) -> PurgeResult:
        """
        Permanently delete one soft-deleted record. This cannot be undone.

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Malformed ID
            NotFoundError: Record does not exist
            ConflictError: Record is still active
        """
        accessor = self.registry.resolve(entity_name)
        entity_id = self._require_id(entity_name, entity_id)

        snapshot = await self._call(
            entity_name, "permanent delete", lambda: accessor.permanent_delete(entity_id)
        )
        logger.info(f"Permanently deleted {entity_name} {entity_id}")
        await self._audit(
            "PURGE",
            entity_name,
            entity_id,
            actor,
            details={"deleted_at": snapshot.get("deleted_at")},
        )

        return PurgeResult(message="Permanently deleted successfully")

    async def soft_delete_item(
        self, entity_name: str, entity_id: str, actor: Optional[Principal] = None
    ) -> SoftDeleteResult:
        """
        Soft delete one record, attributing it to ``actor``.

        Deleting an already deleted record returns it unchanged.

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Malformed ID
            NotFoundError: Record does not exist
        """
        accessor = self.registry.resolve(entity_name)
        entity_id = self._require_id(entity_name, entity_id)

        item = await self._call(
            entity_name, "soft delete", lambda: accessor.soft_delete(entity_id, actor)
        )
        logger.info(f"Soft deleted {entity_name} {entity_id}")
        await self._audit("DELETE", entity_name, entity_id, actor)

        return SoftDeleteResult(message="Deleted successfully", item=item)

    async def _apply_bulk(
        self,
        entity_name: str,
        ids: Iterable[Any],
        action: str,
        operation: Callable[[SoftDeletableAccessor, str], Awaitable[Any]],
    ) -> Tuple[List[str], List[str]]:
        """
        Apply ``operation`` to each id, skipping ids that cannot transition.

        Ids are processed in first-occurrence order. Each id is bounded by the
        operation timeout and the remaining batch time; once the batch
        deadline passes the remaining ids are skipped.

        Returns:
            Tuple of (applied ids, skipped ids)
        """
        accessor = self.registry.resolve(entity_name)
        valid_ids, skipped = self._prepare_ids(entity_name, ids)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.batch_timeout_seconds
        applied: List[str] = []

        for index, entity_id in enumerate(valid_ids):
            remaining = deadline - loop.time()
            if remaining <= 0:
                pending = valid_ids[index:]
                logger.warning(
                    f"Bulk {action} on {entity_name} hit its deadline; "
                    f"{len(pending)} IDs not attempted"
                )
                skipped.extend(pending)
                break

            timeout = min(self.config.operation_timeout_seconds, remaining)
            try:
                await self._call(
                    entity_name,
                    action,
                    lambda: operation(accessor, entity_id),
                    timeout=timeout,
                )
            except (NotFoundError, ConflictError) as e:
                logger.info(f"Bulk {action} skipped {entity_name} {entity_id}: {e}")
                skipped.append(entity_id)
            except InternalError as e:
                logger.warning(f"Bulk {action} failed for {entity_name} {entity_id}: {e}")
                skipped.append(entity_id)
            else:
                applied.append(entity_id)

        return applied, skipped

    async def bulk_restore(
        self,
        entity_name: str,
        ids: Iterable[str],
        actor: Optional[Principal] = None,
    ) -> BulkRestoreResult:
        """
        Restore many records; ids not currently deleted are skipped.

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Empty ID collection
        """
        restored, skipped = await self._apply_bulk(
            entity_name, ids, "restore", lambda accessor, i: accessor.restore(i)
        )
        logger.info(f"Bulk restored {len(restored)} {entity_name} items")
        for entity_id in restored:
            await self._audit("RESTORE", entity_name, entity_id, actor, {"bulk": True})

        return BulkRestoreResult(
            message=f"Restored {len(restored)} items successfully",
            restored_count=len(restored),
            skipped=skipped,
        )

    async def bulk_permanent_delete(
        self,
        entity_name: str,
        ids: Iterable[str],
        actor: Optional[Principal] = None,
    ) -> BulkPurgeResult:
        """
        Permanently delete many soft-deleted records.

        Ids that are missing or still active are skipped, not fatal.

        Raises:
            UnknownEntityError: Entity name is not registered
            ValidationError: Empty ID collection
        """
        deleted, skipped = await self._apply_bulk(
            entity_name,
            ids,
            "permanent delete",
            lambda accessor, i: accessor.permanent_delete(i),
        )
        logger.info(f"Bulk permanently deleted {len(deleted)} {entity_name} items")
        for entity_id in deleted:
            await self._audit("PURGE", entity_name, entity_id, actor, {"bulk": True})

        return BulkPurgeResult(
            message=f"Permanently deleted {len(deleted)} items successfully",
            deleted_count=len(deleted),
            skipped=skipped,
        )

    async def deleted_counts(self) -> Dict[str, int]:
        """Count soft-deleted records for every registered entity."""
        counts: Dict[str, int] = {}
        for name in self.registry.names():
            accessor = self.registry.resolve(name)
            counts[name] = await self._call(name, "count", accessor.count_deleted)
        return counts

    async def repair_metadata(
        self, entity_name: str, actor: Optional[Principal] = None
    ) -> RepairResult:
        """
        Clear deletion metadata that contradicts a record's ``deleted`` flag.

        Raises:
            UnknownEntityError: Entity name is not registered
        """
        accessor = self.registry.resolve(entity_name)
        repaired = await self._call(entity_name, "repair", accessor.repair_metadata)
        if repaired:
            logger.warning(f"Repaired soft delete metadata on {repaired} {entity_name} records")
            await self._audit(
                "REPAIR", entity_name, "*", actor, {"repaired_count": repaired}
            )

        return RepairResult(
            message=f"Repaired {repaired} items",
            repaired_count=repaired,
            entity_type=entity_name,
        )

    # Transport-facing names
    list_deleted = get_deleted_items
    restore = restore_item
    purge = permanent_delete
    bulk_purge = bulk_permanent_delete
