"""
SQLAlchemy mixins for soft delete functionality.

These mixins give a model the four-field soft delete convention every
registered accessor honors: an opaque 24-hex ``id``, a ``deleted`` flag,
``deleted_at`` and the ``deleted_by`` attribution.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional, Type

from sqlalchemy import Boolean, CheckConstraint, DateTime, Select, String, event, select
from sqlalchemy.orm import Mapped, Query, Session, declared_attr, mapped_column

from .audit import AuditAttribution
from .exceptions import ConflictError, NotFoundError
from .models import new_record_id

if TYPE_CHECKING:
    from ..access_control import Principal


class SoftDeleteMixin:
    """
    Mixin to add soft delete functionality to SQLAlchemy models.

    Provides:
    - Record id plus soft delete fields (deleted, deleted_at, deleted_by_*)
    - Idempotent soft delete and strict restore
    - Query helpers for active and deleted records
    - A CHECK constraint keeping the fields consistent

    Usage:
        class Product(Base, SoftDeleteMixin):
            __tablename__ = 'products'
            name: Mapped[str] = mapped_column(String(200))

    Tables holding data imported from stores that never enforced the
    convention can set ``__soft_delete_consistency_check__ = False`` and use
    ``repair_metadata`` to clean up.
    """

    __soft_delete_consistency_check__ = True

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_record_id)

    # Soft delete fields
    deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deleted_by_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    deleted_by_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    @declared_attr
    def __table_args__(cls: Any) -> Any:
        """Add the deletion consistency constraint."""
        if not getattr(cls, "__soft_delete_consistency_check__", True):
            return ()

        table_name = getattr(cls, "__tablename__", cls.__name__.lower())

        return (
            CheckConstraint(
                "(deleted = false AND deleted_at IS NULL AND deleted_by_id IS NULL "
                "AND deleted_by_email IS NULL) OR "
                "(deleted = true AND deleted_at IS NOT NULL)",
                name=f"ck_{table_name}_soft_delete_consistency",
            ),
        )

    @classmethod
    def entity_type(cls) -> str:
        return getattr(cls, "__tablename__", cls.__name__.lower())

    @property
    def deleted_by(self) -> Optional[Dict[str, str]]:
        if self.deleted_by_id is None:
            return None
        return {"id": self.deleted_by_id, "email": self.deleted_by_email or ""}

    def soft_delete(
        self, actor: Optional["Principal"] = None, at: Optional[datetime] = None
    ) -> bool:
        """
        Soft delete this record.

        Deleting an already deleted record leaves it untouched; the first
        deletion's timestamp and attribution win.

        Args:
            actor: Principal performing the deletion, None for system deletes
            at: Deletion timestamp, defaults to now (UTC)

        Returns:
            True if the record changed state, False if it was already deleted
        """
        if self.deleted:
            return False

        self.deleted = True
        self.deleted_at = at or datetime.now(timezone.utc)
        AuditAttribution.stamp(self, actor)
        return True

    def restore(self) -> None:
        """
        Restore a soft-deleted record.

        Raises:
            NotFoundError: If the record is not deleted
        """
        if not self.deleted:
            raise NotFoundError(self.entity_type(), str(self.id))

        self.deleted = False
        self.deleted_at = None
        AuditAttribution.clear(self)

    @classmethod
    def query_active(cls, session: Session) -> Query[Any]:
        """
        Return query for active (non-deleted) records only.

        Args:
            session: SQLAlchemy session

        Returns:
            Query filtered to exclude deleted records
        """
        return session.query(cls).filter(cls.deleted.is_(False))

    @classmethod
    def query_deleted(cls, session: Session) -> Query[Any]:
        """
        Return query for deleted records only.

        Args:
            session: SQLAlchemy session

        Returns:
            Query filtered to include only deleted records
        """
        return session.query(cls).filter(cls.deleted.is_(True))

    @classmethod
    def select_active(cls) -> Select[Any]:
        """Statement selecting active records, for ``AsyncSession.execute``."""
        return select(cls).where(cls.deleted.is_(False))

    @classmethod
    def select_deleted(cls) -> Select[Any]:
        """Statement selecting soft-deleted records."""
        return select(cls).where(cls.deleted.is_(True))

    def to_dict(self, include_deleted_fields: bool = True) -> Dict[str, Any]:
        """
        Convert model to dictionary representation.

        Args:
            include_deleted_fields: Whether to include soft delete fields

        Returns:
            Dictionary representation of the model
        """
        result: Dict[str, Any] = {}

        table = getattr(self, "__table__", None)
        if table is None:
            return result

        for column in table.columns:
            if column.name in ("deleted_by_id", "deleted_by_email"):
                continue
            value = getattr(self, column.name, None)
            if isinstance(value, datetime):
                # Backends without timezone support return naive UTC values
                if value.tzinfo is None:
                    value = value.replace(tzinfo=timezone.utc)
                value = value.isoformat()
            result[column.name] = value

        if include_deleted_fields:
            result["deleted"] = bool(self.deleted)
            result["deleted_by"] = self.deleted_by
        else:
            result.pop("deleted", None)
            result.pop("deleted_at", None)

        return result


def prevent_live_hard_delete(mapper: Any, connection: Any, target: Any) -> None:
    """
    Reject hard deletes of records that were never soft deleted.

    This function should be connected to SQLAlchemy's before_delete event.
    """
    if isinstance(target, SoftDeleteMixin) and not target.deleted:
        raise ConflictError(target.entity_type(), str(target.id))


def register_soft_delete_listeners(base_class: Type[Any]) -> None:
    """
    Register SQLAlchemy event listeners for soft delete functionality.

    Args:
        base_class: The declarative base class
    """
    for mapper in base_class.registry.mappers:
        if issubclass(mapper.class_, SoftDeleteMixin):
            if not event.contains(mapper.class_, "before_delete", prevent_live_hard_delete):
                event.listen(mapper.class_, "before_delete", prevent_live_hard_delete)
