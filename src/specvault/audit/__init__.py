"""Audit trail for mutating vault operations."""

from ._models import AuditEvent
from ._sink import AuditSink, MemoryAuditSink, StorageAuditSink, make_event

__all__ = ["AuditEvent", "AuditSink", "MemoryAuditSink", "StorageAuditSink", "make_event"]
