"""
CanvasOS Exception Hierarchy

All custom exceptions inherit from CanvasOSError, with sub-categories for
the tree, its persistence, and configuration.

Architecture:
    CanvasOSError (Base)
    ├── FileSystemException
    │   ├── NotFoundError
    │   ├── DuplicateNameError
    │   ├── NotAFolderError
    │   ├── NotAFileError
    │   └── InvalidOperandError
    │       ├── InvalidNameError
    │       └── DepthLimitError
    ├── PersistenceException
    │   ├── SnapshotCorruptError
    │   ├── ConflictError
    │   └── StorageError
    └── ConfigurationError
"""

from .base import CanvasOSError, ConfigurationError

from .fs_exceptions import (
    FileSystemException,
    NotFoundError,
    DuplicateNameError,
    NotAFolderError,
    NotAFileError,
    InvalidOperandError,
    InvalidNameError,
    DepthLimitError,
)

from .persistence_exceptions import (
    PersistenceException,
    SnapshotCorruptError,
    ConflictError,
    StorageError,
)

__all__ = [
    "CanvasOSError",
    "ConfigurationError",
    # Filesystem exceptions
    "FileSystemException",
    "NotFoundError",
    "DuplicateNameError",
    "NotAFolderError",
    "NotAFileError",
    "InvalidOperandError",
    "InvalidNameError",
    "DepthLimitError",
    # Persistence exceptions
    "PersistenceException",
    "SnapshotCorruptError",
    "ConflictError",
    "StorageError",
]
