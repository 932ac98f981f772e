"""
Data models for soft delete lifecycle operations.

These models define record identifiers, pagination envelopes and the result
shapes returned by the lifecycle service. Field aliases keep the wire format
(``pageSize``, ``restoredCount`` ...) used by transports.
"""

import re
import secrets
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

RECORD_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

Record = Dict[str, Any]


def new_record_id() -> str:
    """Generate a 24-character hexadecimal record identifier."""
    return secrets.token_hex(12)


def is_valid_record_id(value: Any) -> bool:
    """Check that ``value`` is a 24-character hexadecimal token."""
    return isinstance(value, str) and bool(RECORD_ID_PATTERN.match(value))


class PageWindow(BaseModel):
    """Normalized pagination request."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)


class PageMeta(BaseModel):
    """Pagination metadata for a page of deleted records."""

    model_config = ConfigDict(populate_by_name=True)

    current: int = Field(..., ge=1)
    page_size: int = Field(..., alias="pageSize", ge=1)
    pages: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class PageResult(PageMeta):
    """A page of deleted records together with its metadata."""

    items: List[Record] = Field(default_factory=list)


class RestoreResult(BaseModel):
    message: str
    item: Record


class SoftDeleteResult(BaseModel):
    message: str
    item: Record


class PurgeResult(BaseModel):
    message: str


class BulkRestoreResult(BaseModel):
    """Outcome of a bulk restore; ``skipped`` lists ids that were not restored."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    restored_count: int = Field(..., alias="restoredCount", ge=0)
    skipped: List[str] = Field(default_factory=list)


class BulkPurgeResult(BaseModel):
    """Outcome of a bulk permanent delete."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    deleted_count: int = Field(..., alias="deletedCount", ge=0)
    skipped: List[str] = Field(default_factory=list)


class RepairResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    repaired_count: int = Field(..., alias="repairedCount", ge=0)
    entity_type: Optional[str] = None
