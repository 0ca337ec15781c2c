"""
Filesystem Exceptions

Exceptions raised by the virtual tree: lookups that miss, names that
collide, and operations aimed at the wrong kind of node.

Every filesystem error is recoverable. Callers turn it into a single line
of output (the shell) or a logged no-op (the file browser); a failed
operation never leaves the tree partially mutated.
"""

from typing import Optional, Any

from .base import CanvasOSError


class FileSystemException(CanvasOSError):
    """
    Base exception for all filesystem-related errors.

    Attributes:
        message: Human-readable error description
        path: Tree path associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
        context: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 4000, context=context)
        self.path = path
        if path:
            self.context["path"] = path

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.path:
            base = f"{base} (path={self.path})"
        return base


class NotFoundError(FileSystemException):
    """
    The path does not resolve to a node.

    Example:
        >>> raise NotFoundError("/Documents/missing.txt")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"No such file or folder: {path}",
            path=path,
            error_code=4001,
            context=context
        )


class DuplicateNameError(FileSystemException):
    """
    A sibling with the same name already exists.

    Raised regardless of the kind of the node being created: a file and a
    folder may not share a name under one parent.

    Example:
        >>> raise DuplicateNameError("/", "Docs")
    """

    def __init__(
        self,
        parent_path: str,
        name: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["name"] = name
        super().__init__(
            message=f"Name already exists: {name}",
            path=parent_path,
            error_code=4002,
            context=ctx
        )
        self.name = name


class NotAFileError(FileSystemException):
    """
    Path names a folder where a file was required.

    Example:
        >>> raise NotAFileError("/Documents")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a file: {path}",
            path=path,
            error_code=4008,
            context=context
        )


class NotAFolderError(FileSystemException):
    """
    Path names a file where a folder was required.

    Example:
        >>> raise NotAFolderError("/Documents/welcome.txt")
    """

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"Not a folder: {path}",
            path=path,
            error_code=4009,
            context=context
        )


class InvalidOperandError(FileSystemException):
    """
    A required operand is missing or unusable.

    Example:
        >>> raise InvalidOperandError("missing operand", operation="mkdir")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        error_code: int = 4010,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(
            message=message,
            path=path,
            error_code=error_code,
            context=ctx
        )
        self.operation = operation


class InvalidNameError(InvalidOperandError):
    """
    A node name is empty, contains a separator, or is `.`/`..`.

    Example:
        >>> raise InvalidNameError("a/b")
    """

    def __init__(
        self,
        name: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["name"] = name
        super().__init__(
            message=f"Invalid name: {name!r}",
            error_code=4011,
            context=ctx
        )
        self.name = name


class DepthLimitError(InvalidOperandError):
    """
    A new node would sit deeper below root than the tree allows.

    Example:
        >>> raise DepthLimitError("/a/b/c", limit=2)
    """

    def __init__(
        self,
        path: str,
        limit: int,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["limit"] = limit
        super().__init__(
            message=f"Nesting deeper than {limit} levels: {path}",
            path=path,
            error_code=4012,
            context=ctx
        )
        self.limit = limit
