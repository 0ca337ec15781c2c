"""
Persistence Exceptions

Errors raised while reading or writing the tree snapshot in the
key-value store.
"""

from typing import Optional, Any

from .base import CanvasOSError


class PersistenceException(CanvasOSError):
    """
    Base exception for snapshot storage errors.

    Attributes:
        key: Storage key associated with the error (if applicable)
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message, error_code=error_code or 5000, context=ctx)
        self.key = key


class SnapshotCorruptError(PersistenceException):
    """
    The stored record is not a valid tree snapshot.

    Example:
        >>> raise SnapshotCorruptError("os-filesystem", reason="not a list")
    """

    def __init__(
        self,
        key: str,
        reason: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        super().__init__(
            message=f"Corrupt snapshot under key: {key}",
            key=key,
            error_code=5001,
            context=ctx
        )
        self.reason = reason


class ConflictError(PersistenceException):
    """
    Another writer saved the snapshot since this adapter last saw it.

    Only raised by adapters running in strict mode; the default is
    last-writer-wins.

    Example:
        >>> raise ConflictError("os-filesystem", expected=3, actual=4)
    """

    def __init__(
        self,
        key: str,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if expected is not None:
            ctx["expected_revision"] = expected
        if actual is not None:
            ctx["actual_revision"] = actual
        super().__init__(
            message=f"Snapshot was modified by another writer: {key}",
            key=key,
            error_code=5002,
            context=ctx
        )
        self.expected = expected
        self.actual = actual


class StorageError(PersistenceException):
    """
    The backing store could not be read or written.

    Example:
        >>> raise StorageError("Cannot write store file", key="os-filesystem")
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, key=key, error_code=5003, context=context)
