"""
Node Module

The two kinds of entry in the virtual tree. Nodes are frozen: a change
to the tree produces new nodes along the changed path and reuses every
other subtree as-is, so a node handed out to a caller can never change
underneath it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional, Tuple, Union


class NodeType(Enum):
    """Kinds of node. Values are the persisted ``type`` strings."""
    FILE = 'file'
    FOLDER = 'folder'


@dataclass(frozen=True)
class FileNode:
    """A leaf carrying text content."""

    name: str
    path: str
    content: str = ''

    node_type: ClassVar[NodeType] = NodeType.FILE

    @property
    def is_folder(self) -> bool:
        return False

    @property
    def is_file(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record shape."""
        return {
            'name': self.name,
            'type': self.node_type.value,
            'path': self.path,
            'content': self.content,
        }


@dataclass(frozen=True)
class FolderNode:
    """An ordered container of child nodes with unique names."""

    name: str
    path: str
    children: Tuple['Node', ...] = ()

    node_type: ClassVar[NodeType] = NodeType.FOLDER

    @property
    def is_folder(self) -> bool:
        return True

    @property
    def is_file(self) -> bool:
        return False

    def child(self, name: str) -> Optional['Node']:
        """Return the direct child called ``name``, if any."""
        return find_child(self.children, name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record shape, children included."""
        return {
            'name': self.name,
            'type': self.node_type.value,
            'path': self.path,
            'children': [child.to_dict() for child in self.children],
        }


Node = Union[FileNode, FolderNode]


def find_child(nodes: Tuple[Node, ...], name: str) -> Optional['Node']:
    """Linear lookup of a sibling by name."""
    for node in nodes:
        if node.name == name:
            return node
    return None


def iter_nodes(nodes: Tuple[Node, ...]) -> Iterator[Node]:
    """Depth-first, pre-order iteration over a node sequence."""
    for node in nodes:
        yield node
        if node.is_folder:
            yield from iter_nodes(node.children)
