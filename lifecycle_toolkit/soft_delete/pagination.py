"""Pagination policy for deleted-record listings."""

import math
from typing import Any, Optional

from .exceptions import ValidationError
from .models import PageMeta, PageWindow

DEFAULT_PAGE_SIZE = 10
DEFAULT_MAX_PAGE_SIZE = 100


def _coerce_positive(value: Any, field: str) -> Optional[int]:
    """Parse ``value`` as an int; None for absent or non-positive values."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "must be an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            raise ValidationError(field, f"{value!r} is not an integer") from None
    else:
        raise ValidationError(field, "must be an integer")

    return number if number > 0 else None


class PaginationPolicy:
    """Turns raw page/size parameters into an offset/limit window."""

    def __init__(
        self,
        default_size: int = DEFAULT_PAGE_SIZE,
        max_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        if default_size < 1 or max_size < 1:
            raise ValueError("Page sizes must be positive")
        if default_size > max_size:
            raise ValueError("Default page size cannot exceed the maximum page size")
        self.default_size = default_size
        self.max_size = max_size

    def normalize(self, page: Any = None, size: Any = None) -> PageWindow:
        """
        Normalize pagination input.

        Absent or non-positive values fall back to page 1 and the default
        size; ``size`` is clamped to the maximum.

        Raises:
            ValidationError: If a value is not an integer
        """
        page_number = _coerce_positive(page, "page") or 1
        page_size = min(_coerce_positive(size, "size") or self.default_size, self.max_size)

        return PageWindow(
            offset=(page_number - 1) * page_size,
            limit=page_size,
            page=page_number,
            size=page_size,
        )

    @staticmethod
    def build_meta(current: int, size: int, total: int) -> PageMeta:
        pages = math.ceil(total / size) if total > 0 else 0
        return PageMeta(current=current, page_size=size, pages=pages, total=total)
