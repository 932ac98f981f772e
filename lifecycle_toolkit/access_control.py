"""
Principal model supplied by the access-control layer.

Authentication and role gating happen upstream; the lifecycle core only
receives an already authenticated principal and uses it as an audit stamp.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Principal:
    """Represents the authenticated actor of a lifecycle call."""

    id: str
    email: str
    role: str = "admin"

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise ValueError("Principal ID is required")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Principal":
        """Build a principal from a decoded token or request user payload."""
        principal_id = data.get("id") or data.get("_id")
        return cls(
            id=str(principal_id) if principal_id is not None else "",
            email=str(data.get("email", "")),
            role=str(data.get("role", "admin")),
        )

    def to_stamp(self) -> Dict[str, str]:
        """Return the ``{id, email}`` reference stored on deleted records."""
        return {"id": self.id, "email": self.email}
