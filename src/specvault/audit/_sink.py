# pyright: reportAny=false, reportExplicitAny=false
"""Audit sinks.

Every mutating vault operation emits an ``AuditEvent`` to the sink injected
into the component. ``StorageAuditSink`` keeps one JSONL log per API next to
the vault data; ``MemoryAuditSink`` keeps events in a list.
"""

from typing import Any, Final, Protocol, runtime_checkable

import anyio
import orjson
import pendulum
from structlog.typing import FilteringBoundLogger

from specvault.exceptions import StorageNotFoundError, ValidationError
from specvault.storage import StorageProvider, audit_key
from specvault.utils import get_null_logger

from ._models import AuditEvent

__all__ = ["AuditSink", "MemoryAuditSink", "StorageAuditSink", "make_event"]


@runtime_checkable
class AuditSink(Protocol):
    """Receives audit events."""

    async def record(self, event: AuditEvent) -> None:
        """Persist or forward one event."""
        ...


def make_event(  # noqa: PLR0913
    api_id: str,
    event: str,
    *,
    user: str,
    version: str | None = None,
    reason: str | None = None,
    **details: Any,
) -> AuditEvent:
    """Build an event stamped with the current time."""
    return AuditEvent(
        timestamp=pendulum.now("UTC"),
        api_id=api_id,
        event=event,
        user=user,
        version=version,
        reason=reason,
        details=details,
    )


def _matches_filters(  # noqa: PLR0913
    entry: AuditEvent,
    since: pendulum.DateTime | None,
    until: pendulum.DateTime | None,
    event_filter: str | None,
    user_filter: str | None,
    version_filter: str | None,
) -> bool:
    if since is not None and entry.timestamp < since:
        return False
    if until is not None and entry.timestamp > until:
        return False
    if event_filter is not None and event_filter not in entry.event:
        return False
    if version_filter is not None and entry.version != version_filter:
        return False
    return not (user_filter is not None and entry.user != user_filter)


def _select(  # noqa: PLR0913
    entries: list[AuditEvent],
    since: pendulum.DateTime | None,
    until: pendulum.DateTime | None,
    event_filter: str | None,
    user_filter: str | None,
    version_filter: str | None,
    limit: int,
) -> list[AuditEvent]:
    if limit < 1:
        msg = f"limit must be >= 1, got {limit}"
        raise ValueError(msg)

    selected = [
        e
        for e in entries
        if _matches_filters(e, since, until, event_filter, user_filter, version_filter)
    ]
    # Newest first; the stable sort keeps later appends ahead on equal stamps.
    selected.reverse()
    selected.sort(key=lambda e: e.timestamp, reverse=True)
    return selected[:limit]


class StorageAuditSink:
    """Audit sink writing one JSON line per event to ``_audit/{api_id}.jsonl``.

    The storage contract has no append, so each record rewrites the log.
    Appends within this process are serialized by a lock.
    """

    __slots__: Final = ("_lock", "_logger", "_storage")

    _storage: StorageProvider
    _lock: anyio.Lock
    _logger: FilteringBoundLogger

    def __init__(
        self, storage: StorageProvider, *, logger: FilteringBoundLogger | None = None
    ) -> None:
        self._storage = storage
        self._lock = anyio.Lock()
        self._logger = logger if logger is not None else get_null_logger()

    async def record(self, event: AuditEvent) -> None:
        key = audit_key(_log_name(event.api_id))
        line = orjson.dumps(event.to_dict()) + b"\n"
        async with self._lock:
            try:
                existing = await self._storage.read(key)
            except StorageNotFoundError:
                existing = b""
            await self._storage.write(key, existing + line)

    async def clear(self, api_id: str) -> bool:
        """Delete the audit log of one API.

        Returns:
            True if a log existed.
        """
        key = audit_key(_log_name(api_id))
        async with self._lock:
            try:
                await self._storage.delete(key)
            except StorageNotFoundError:
                return False
        self._logger.warning("audit_log_cleared", api_id=api_id)
        return True

    async def get(  # noqa: PLR0913
        self,
        api_id: str,
        *,
        since: pendulum.DateTime | None = None,
        until: pendulum.DateTime | None = None,
        event_filter: str | None = None,
        user_filter: str | None = None,
        version_filter: str | None = None,
        limit: int = 50,
    ) -> list[AuditEvent]:
        """Query the audit log for one API.

        Args:
            api_id: The API whose log to read.
            since: Only include events at or after this timestamp.
            until: Only include events at or before this timestamp.
            event_filter: Only include events whose type contains this substring.
            user_filter: Only include events by this exact user.
            version_filter: Only include events for this exact version.
            limit: Maximum number of events to return. Must be >= 1.

        Returns:
            Matching events, newest first.

        Raises:
            ValueError: If limit is less than 1.
            ValidationError: If a log line is not valid JSON.
        """
        key = audit_key(_log_name(api_id))
        try:
            content = await self._storage.read(key)
        except StorageNotFoundError:
            content = b""

        entries: list[AuditEvent] = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                raw = orjson.loads(line)
            except orjson.JSONDecodeError as e:
                msg = f"Invalid JSON on line {line_num} of {key}: {e}"
                raise ValidationError(msg, field=key, rule="jsonl") from e
            entries.append(AuditEvent.from_dict(raw))

        return _select(
            entries, since, until, event_filter, user_filter, version_filter, limit
        )


class MemoryAuditSink:
    """Audit sink keeping events in memory, oldest first."""

    __slots__: Final = ("events",)

    events: list[AuditEvent]

    def __init__(self) -> None:
        self.events = []

    async def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    async def get(  # noqa: PLR0913
        self,
        api_id: str,
        *,
        since: pendulum.DateTime | None = None,
        until: pendulum.DateTime | None = None,
        event_filter: str | None = None,
        user_filter: str | None = None,
        version_filter: str | None = None,
        limit: int = 50,
    ) -> list[AuditEvent]:
        entries = [e for e in self.events if e.api_id == api_id]
        return _select(
            entries, since, until, event_filter, user_filter, version_filter, limit
        )

    async def clear(self, api_id: str) -> bool:
        kept = [e for e in self.events if e.api_id != api_id]
        removed = len(kept) != len(self.events)
        self.events = kept
        return removed

    def event_types(self) -> list[str]:
        """Event types recorded so far, oldest first."""
        return [e.event for e in self.events]


def _log_name(api_id: str) -> str:
    # ":" is not a portable filename character.
    return api_id.replace(":", "--")
