"""
Custom exceptions for the sync engine.

Codec-level problems are swallowed close to where they happen; remote
and persistence errors propagate to the orchestrator, which turns them
into a user-visible sync status.
"""

from __future__ import annotations


class NomisSyncError(Exception):
    """Base exception for all sync engine errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RemoteUnavailableError(NomisSyncError):
    """Raised when no usable remote account or session exists."""

    def __init__(self, status: str, message: str | None = None):
        super().__init__(
            message or f"Remote store unavailable (status: {status})",
            {"status": status},
        )
        self.status = status


class RemoteTransportError(NomisSyncError):
    """Raised when a remote call fails (timeouts, quota, conflicts)."""

    def __init__(self, operation: str, cause: Exception | None = None):
        details = {"operation": operation}
        if cause:
            details["cause"] = str(cause)
        message = f"Remote operation failed: {operation}"
        if cause:
            message += f" ({cause})"
        super().__init__(message, details)
        self.operation = operation
        self.cause = cause


class AuthenticationError(NomisSyncError):
    """Raised when remote credentials are missing or rejected."""

    def __init__(self, endpoint: str, reason: str | None = None):
        details = {"endpoint": endpoint}
        if reason:
            details["reason"] = reason
        super().__init__(f"Authentication failed for {endpoint}", details)
        self.endpoint = endpoint
        self.reason = reason


class RecordDecodeError(NomisSyncError):
    """Raised inside the codec for a malformed record, field or child.

    Never escapes the codec.
    """

    def __init__(self, record_id: str, reason: str):
        super().__init__(
            f"Cannot decode record {record_id}: {reason}",
            {"record_id": record_id, "reason": reason},
        )
        self.record_id = record_id
        self.reason = reason


class LocalPersistenceError(NomisSyncError):
    """Raised when the local entity store fails to load or save."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Local store error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class PermissionDeniedError(NomisSyncError):
    """The current principal may not write to the remote store."""

    def __init__(self, operation: str, reason: str = "write access denied"):
        super().__init__(
            f"Permission denied for {operation}: {reason}",
            {"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class SyncError(NomisSyncError):
    """Raised when a sync run fails."""

    def __init__(self, message: str, kind: str | None = None, cause: Exception | None = None):
        details: dict = {}
        if kind:
            details["kind"] = kind
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.kind = kind
        self.cause = cause
