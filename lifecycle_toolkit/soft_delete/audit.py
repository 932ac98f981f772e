"""
Audit attribution for soft-deleted records.

Stamps the acting principal onto a record when it is soft deleted and clears
the stamp when it is restored. Works on ORM rows using ``SoftDeleteMixin``
(``deleted_by_id`` / ``deleted_by_email`` columns) and on plain dictionary
records (``deleted_by`` key).
"""

from typing import Any, MutableMapping, Optional

from ..access_control import Principal


class AuditAttribution:
    """Captures the acting principal on soft delete and clears it on restore."""

    @staticmethod
    def stamp(record: Any, principal: Optional[Principal]) -> Any:
        """
        Attribute a soft delete to ``principal``.

        A missing principal (system-initiated delete) leaves the attribution
        empty; that is allowed.

        Args:
            record: ORM row or dictionary record being soft deleted
            principal: Acting principal, or None

        Returns:
            The same record, stamped
        """
        if principal is None:
            return AuditAttribution.clear(record)

        if isinstance(record, MutableMapping):
            record["deleted_by"] = principal.to_stamp()
        else:
            record.deleted_by_id = principal.id
            record.deleted_by_email = principal.email
        return record

    @staticmethod
    def clear(record: Any) -> Any:
        """Remove attribution, as done when a record is restored."""
        if isinstance(record, MutableMapping):
            record["deleted_by"] = None
        else:
            record.deleted_by_id = None
            record.deleted_by_email = None
        return record

    @staticmethod
    def actor_id(principal: Optional[Principal]) -> str:
        """User ID to report to the audit trail; ``system`` when unattributed."""
        return principal.id if principal is not None else "system"
