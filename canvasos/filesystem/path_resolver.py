"""
Path Resolver Module

Path algebra for the virtual tree. Everything here is a pure string
function: nothing touches the tree, and nothing fails. Whether a path
names a real node is decided by the tree store.
"""

from typing import List

ROOT = '/'
SEPARATOR = '/'
RESERVED_NAMES = frozenset({'.', '..'})

# Deepest a node may sit below root.
MAX_DEPTH = 64


class PathResolver:
    """
    Resolves and manipulates tree paths.

    ``resolve`` applies exactly one token to a location; it does not walk
    multi-segment relative paths, so ``Docs/..`` is appended verbatim and
    simply fails to exist later.
    """

    @staticmethod
    def resolve(current_path: str, token: str) -> str:
        """
        Resolve a single token against the current location.

        Args:
            current_path: Absolute path of the current folder
            token: Path token typed by the user

        Returns:
            Absolute path. ``..`` at root stays at root.

        Example:
            >>> PathResolver.resolve('/Docs', 'Sub')
            '/Docs/Sub'
            >>> PathResolver.resolve('/Docs', '..')
            '/'
        """
        if token.startswith(SEPARATOR):
            return token

        if token == '..':
            return PathResolver.parent(current_path)

        if token == '.':
            return current_path

        if current_path.endswith(SEPARATOR):
            return f"{current_path}{token}"
        return f"{current_path}{SEPARATOR}{token}"

    @staticmethod
    def components(path: str) -> List[str]:
        """Split a path into its non-empty segments."""
        return [c for c in path.split(SEPARATOR) if c]

    @staticmethod
    def canonical(path: str) -> str:
        """
        Collapse repeated and trailing separators.

        ``/Docs//Sub/`` becomes ``/Docs/Sub``; an empty path is root.
        """
        return SEPARATOR + SEPARATOR.join(PathResolver.components(path))

    @staticmethod
    def join(parent_path: str, name: str) -> str:
        """Path of a child named ``name`` under ``parent_path``."""
        parent = PathResolver.canonical(parent_path)
        if parent == ROOT:
            return f"{ROOT}{name}"
        return f"{parent}{SEPARATOR}{name}"

    @staticmethod
    def parent(path: str) -> str:
        """Parent path; the parent of root is root."""
        components = PathResolver.components(path)
        return SEPARATOR + SEPARATOR.join(components[:-1])

    @staticmethod
    def basename(path: str) -> str:
        """Last segment of a path, or ``/`` for root."""
        components = PathResolver.components(path)
        return components[-1] if components else ROOT

    @staticmethod
    def is_root(path: str) -> bool:
        return not PathResolver.components(path)

    @staticmethod
    def is_valid_name(name: str) -> bool:
        """A node name is non-empty, has no separator and is not ``.``/``..``."""
        return bool(name) and SEPARATOR not in name and name not in RESERVED_NAMES

    @staticmethod
    def get_depth(path: str) -> int:
        """Number of segments below root."""
        return len(PathResolver.components(path))
