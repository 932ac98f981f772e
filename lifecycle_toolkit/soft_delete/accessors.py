"""
Storage accessors for soft-deletable entity collections.

``SoftDeletableAccessor`` is the capability interface every registered entity
collection implements. ``SQLAlchemyAccessor`` implements it for any model
using ``SoftDeleteMixin`` on top of SQLAlchemy's asyncio extension.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional, Type

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..access_control import Principal
from .audit import AuditAttribution
from .exceptions import ConflictError, InternalError, LifecycleError, NotFoundError
from .mixins import SoftDeleteMixin
from .models import Record

logger = logging.getLogger(__name__)


class SoftDeletableAccessor(ABC):
    """Soft delete capability of one entity collection."""

    @abstractmethod
    async def count_deleted(self) -> int:
        """Number of records currently soft deleted."""

    @abstractmethod
    async def find_deleted(self, offset: int, limit: int) -> List[Record]:
        """
        Page through soft-deleted records.

        Ordering must be stable for an unchanged deleted set so that
        consecutive pages neither repeat nor skip records.
        """

    @abstractmethod
    async def restore(self, entity_id: str) -> Record:
        """
        Return a soft-deleted record to the active state.

        Raises:
            NotFoundError: If the id is missing or not soft deleted
        """

    @abstractmethod
    async def permanent_delete(self, entity_id: str) -> Record:
        """
        Irreversibly remove a soft-deleted record.

        Raises:
            ConflictError: If the record exists but is active
            NotFoundError: If the record does not exist
        """

    @abstractmethod
    async def soft_delete(self, entity_id: str, actor: Optional[Principal]) -> Record:
        """
        Mark a record deleted; already deleted records are returned unchanged.

        Raises:
            NotFoundError: If the record does not exist
        """

    async def repair_metadata(self) -> int:
        """
        Fix records whose deletion metadata contradicts their ``deleted`` flag.

        Accessors whose storage cannot hold such records keep this default.

        Returns:
            Number of records repaired
        """
        return 0


class SQLAlchemyAccessor(SoftDeletableAccessor):
    """
    Accessor for a SQLAlchemy model using ``SoftDeleteMixin``.

    Each call runs in its own ``AsyncSession``, so a call cancelled by a
    timeout rolls back without disturbing the others. Every mutation locks
    the row (``SELECT ... FOR UPDATE`` where the database supports it) before
    checking its state, so concurrent restore and purge calls on the same id
    serialize and the loser sees the winner's result.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: Type[SoftDeleteMixin],
        entity_type: Optional[str] = None,
    ):
        """
        Initialize the accessor.

        Args:
            session_factory: Factory producing one async session per call
            model: Model class using SoftDeleteMixin
            entity_type: Name used in errors, defaults to the table name
        """
        self.session_factory = session_factory
        self.model = model
        self.entity_type = entity_type or model.entity_type()

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
            except LifecycleError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Storage failure during {action} on {self.entity_type}: {e}")
                raise InternalError(
                    f"Storage failure during {action} on {self.entity_type}",
                    entity_type=self.entity_type,
                ) from e

    async def _lock(
        self, session: AsyncSession, entity_id: str
    ) -> Optional[SoftDeleteMixin]:
        result = await session.execute(
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_deleted(self) -> int:
        async with self._session("count") as session:
            total = await session.scalar(
                select(func.count())
                .select_from(self.model)
                .where(self.model.deleted.is_(True))
            )
            return total or 0

    async def find_deleted(self, offset: int, limit: int) -> List[Record]:
        async with self._session("listing") as session:
            result = await session.execute(
                self.model.select_deleted()
                .order_by(self.model.deleted_at.desc(), self.model.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return [row.to_dict() for row in result.scalars().all()]

    async def restore(self, entity_id: str) -> Record:
        async with self._session("restore") as session:
            row = await self._lock(session, entity_id)
            if row is None or not row.deleted:
                raise NotFoundError(self.entity_type, entity_id)

            row.restore()
            record = row.to_dict()
            await session.commit()
            return record

    async def permanent_delete(self, entity_id: str) -> Record:
        async with self._session("permanent delete") as session:
            row = await self._lock(session, entity_id)
            if row is None:
                raise NotFoundError(self.entity_type, entity_id, state="existing")
            if not row.deleted:
                raise ConflictError(self.entity_type, entity_id)

            snapshot = row.to_dict()
            await session.delete(row)
            await session.commit()
            return snapshot

    async def soft_delete(self, entity_id: str, actor: Optional[Principal]) -> Record:
        async with self._session("soft delete") as session:
            row = await self._lock(session, entity_id)
            if row is None:
                raise NotFoundError(self.entity_type, entity_id, state="existing")

            if not row.soft_delete(actor):
                logger.debug(f"{self.entity_type} {entity_id} was already deleted")
            record = row.to_dict()
            await session.commit()
            return record

    async def repair_metadata(self) -> int:
        async with self._session("repair") as session:
            model = self.model
            stale = (
                await session.execute(
                    model.select_active()
                    .where(
                        or_(
                            model.deleted_at.isnot(None),
                            model.deleted_by_id.isnot(None),
                            model.deleted_by_email.isnot(None),
                        )
                    )
                    .with_for_update()
                )
            ).scalars().all()
            for row in stale:
                row.deleted_at = None
                AuditAttribution.clear(row)

            # Deleted records must carry a deletion timestamp
            undated = (
                await session.execute(
                    model.select_deleted()
                    .where(model.deleted_at.is_(None))
                    .with_for_update()
                )
            ).scalars().all()
            now = datetime.now(timezone.utc)
            for row in undated:
                row.deleted_at = now

            await session.commit()
            return len(stale) + len(undated)
