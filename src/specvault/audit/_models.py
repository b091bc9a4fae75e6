# pyright: reportAny=false, reportExplicitAny=false
"""Audit event model."""

from dataclasses import dataclass, field
from typing import Any, Self

import pendulum

from specvault.utils import parse_timestamp

__all__ = ["AuditEvent"]


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """One mutating operation performed on the vault.

    Attributes:
        timestamp: When the operation completed (UTC).
        api_id: The API the operation touched.
        event: Event type, e.g. ``version_added`` or ``spec_moved``.
        user: Who performed the operation.
        version: The version involved, if any.
        reason: Free-text reason supplied by the caller.
        details: Operation-specific context.
    """

    timestamp: pendulum.DateTime
    api_id: str
    event: str
    user: str
    version: str | None = None
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp.to_iso8601_string(),
            "api_id": self.api_id,
            "event": self.event,
            "user": self.user,
            "details": self.details,
        }
        if self.version is not None:
            data["version"] = self.version
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Self:
        return cls(
            timestamp=parse_timestamp(raw["timestamp"]),
            api_id=raw["api_id"],
            event=raw["event"],
            user=raw["user"],
            version=raw.get("version"),
            reason=raw.get("reason"),
            details=raw.get("details") or {},
        )
