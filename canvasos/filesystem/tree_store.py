"""
Tree Store Module

Owns the in-memory tree of folders and files and is the only place it
changes. Provides:
- Listing and existence checks
- Node creation, deletion and content writes
- Copy-on-write mutation with structural sharing
- Optional write-through persistence and change notification
"""

from dataclasses import replace
from typing import Callable, Iterator, List, Optional, Tuple, TYPE_CHECKING

from .node import FileNode, FolderNode, Node, NodeType, find_child, iter_nodes
from .path_resolver import PathResolver, ROOT, MAX_DEPTH
from canvasos.exceptions import (
    NotFoundError,
    DuplicateNameError,
    NotAFolderError,
    NotAFileError,
    InvalidOperandError,
    InvalidNameError,
    DepthLimitError,
)
from canvasos.logger import get_logger

if TYPE_CHECKING:
    from .persistence import PersistenceAdapter


Tree = Tuple[Node, ...]
Listener = Callable[[Tree], None]
ChildUpdate = Callable[[Tree], Tree]


class TreeStore:
    """
    The virtual filesystem tree.

    The root is implicit: the store holds the ordered top-level sequence
    and ``/`` refers to it. Every mutation builds a new top-level tuple in
    which only the nodes between the root and the target are new objects;
    the store swaps it in only once the whole operation has succeeded.

    Example:
        >>> store = TreeStore()
        >>> store.create_node('/', 'Docs', NodeType.FOLDER)
        '/Docs'
        >>> [node.name for node in store.list('/')]
        ['Docs']
    """

    def __init__(
        self,
        nodes: Tree = (),
        persistence: Optional['PersistenceAdapter'] = None
    ):
        self._root: Tree = tuple(nodes)
        self._persistence = persistence
        self._listeners: List[Listener] = []
        self._logger = get_logger('tree_store')

    @classmethod
    def from_persistence(cls, persistence: 'PersistenceAdapter') -> 'TreeStore':
        """Load a snapshot and keep writing changes back to the same store."""
        return cls(persistence.load(), persistence=persistence)

    # Queries

    def snapshot(self) -> Tree:
        """The current top-level sequence."""
        return self._root

    def get(self, path: str) -> Optional[Node]:
        """
        Look up the node at ``path``.

        Walks the segments from root; every segment but the last must name a
        folder.

        Args:
            path: Absolute path

        Returns:
            The node, or None if the path does not resolve. Root is not a
            node, so ``get('/')`` is None.
        """
        nodes = self._root
        node: Optional[Node] = None

        for component in PathResolver.components(path):
            if node is not None and not node.is_folder:
                return None
            node = find_child(nodes, component)
            if node is None:
                return None
            if node.is_folder:
                nodes = node.children

        return node

    def exists(self, path: str) -> bool:
        """Check if a path names root or an existing node."""
        return PathResolver.is_root(path) or self.get(path) is not None

    def is_folder(self, path: str) -> bool:
        """Check if a path names root or an existing folder."""
        if PathResolver.is_root(path):
            return True
        node = self.get(path)
        return node is not None and node.is_folder

    def list(self, path: str) -> List[Node]:
        """
        List the children of a folder, in insertion order.

        Args:
            path: Folder path, or ``/`` for the top level

        Returns:
            The child nodes

        Raises:
            NotFoundError: If nothing exists at ``path``
            NotAFolderError: If ``path`` names a file
        """
        return list(self._children_of(path))

    def read_content(self, path: str) -> str:
        """
        Read a file's content.

        Raises:
            NotFoundError: If nothing exists at ``path``
            NotAFileError: If ``path`` names a folder or root
        """
        if PathResolver.is_root(path):
            raise NotAFileError(ROOT)
        node = self.get(path)
        if node is None:
            raise NotFoundError(path)
        if not node.is_file:
            raise NotAFileError(path)
        return node.content

    def walk(self) -> Iterator[Node]:
        """Iterate every node depth-first."""
        return iter_nodes(self._root)

    # Mutations

    def create_node(self, parent_path: str, name: str, node_type: NodeType) -> str:
        """
        Create an empty file or folder.

        The new node goes at the end of the parent's children.

        Args:
            parent_path: Folder to create in (``/`` for the top level)
            name: Name of the new node
            node_type: NodeType.FILE or NodeType.FOLDER

        Returns:
            Path of the new node

        Raises:
            InvalidNameError: If ``name`` is not a valid node name
            DepthLimitError: If the new node would be deeper than MAX_DEPTH
            NotFoundError: If the parent does not exist
            NotAFolderError: If the parent is a file
            DuplicateNameError: If the parent already has a child ``name``
        """
        if not PathResolver.is_valid_name(name):
            raise InvalidNameError(name)

        parent = PathResolver.canonical(parent_path)
        path = PathResolver.join(parent, name)
        if PathResolver.get_depth(path) > MAX_DEPTH:
            raise DepthLimitError(path, MAX_DEPTH)

        if node_type is NodeType.FOLDER:
            new_node: Node = FolderNode(name=name, path=path)
        else:
            new_node = FileNode(name=name, path=path)

        def append(children: Tree) -> Tree:
            if find_child(children, name) is not None:
                raise DuplicateNameError(parent, name)
            return children + (new_node,)

        self._commit(self._update_children(self._root, parent, append))

        self._logger.debug(
            "Created node",
            context={'path': path, 'type': node_type.value}
        )
        return path

    def delete_node(self, path: str) -> None:
        """
        Delete a node and, for a folder, everything under it.

        Raises:
            InvalidOperandError: If ``path`` is root
            NotFoundError: If nothing exists at ``path``
        """
        if PathResolver.is_root(path):
            raise InvalidOperandError("Cannot delete the root folder", path=ROOT,
                                      operation="delete")

        name = PathResolver.basename(path)

        def remove(children: Tree) -> Tree:
            if find_child(children, name) is None:
                raise NotFoundError(path)
            return tuple(child for child in children if child.name != name)

        try:
            new_root = self._update_children(
                self._root, PathResolver.parent(path), remove
            )
        except (NotFoundError, NotAFolderError):
            raise NotFoundError(path) from None

        self._commit(new_root)
        self._logger.debug("Deleted node", context={'path': path})

    def write_content(self, path: str, content: str) -> None:
        """
        Replace a file's content.

        Raises:
            NotFoundError: If nothing exists at ``path``
            NotAFileError: If ``path`` names a folder or root
        """
        if PathResolver.is_root(path):
            raise NotAFileError(ROOT)

        name = PathResolver.basename(path)

        def rewrite(children: Tree) -> Tree:
            updated = []
            found = False
            for child in children:
                if child.name == name:
                    if not child.is_file:
                        raise NotAFileError(path)
                    child = replace(child, content=content)
                    found = True
                updated.append(child)
            if not found:
                raise NotFoundError(path)
            return tuple(updated)

        try:
            new_root = self._update_children(
                self._root, PathResolver.parent(path), rewrite
            )
        except (NotFoundError, NotAFolderError):
            raise NotFoundError(path) from None

        self._commit(new_root)
        self._logger.debug(
            "Wrote content",
            context={'path': path, 'length': len(content)}
        )

    # Change tracking

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call ``listener`` with the new top-level sequence after every change.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reload(self) -> None:
        """Replace the tree with the persisted snapshot."""
        if self._persistence is None:
            return
        self._root = tuple(self._persistence.load())
        self._logger.info("Reloaded tree from storage")
        self._notify()

    # Internals

    def _children_of(self, path: str) -> Tree:
        if PathResolver.is_root(path):
            return self._root
        node = self.get(path)
        if node is None:
            raise NotFoundError(path)
        if not node.is_folder:
            raise NotAFolderError(path)
        return node.children

    def _update_children(
        self,
        nodes: Tree,
        folder_path: str,
        update: ChildUpdate
    ) -> Tree:
        """
        Rebuild the chain from ``nodes`` down to the folder at ``folder_path``.

        ``update`` receives that folder's children and returns the new
        sequence. Each folder on the way down is replaced by a copy whose
        only change is the one child slot on the path; all other subtrees
        are reused.

        Raises:
            NotFoundError: If a segment of ``folder_path`` is missing
            NotAFolderError: If a segment of ``folder_path`` is a file
        """
        components = PathResolver.components(folder_path)

        def rebuild(siblings: Tree, depth: int) -> Tree:
            if depth == len(components):
                return update(siblings)

            name = components[depth]
            for index, node in enumerate(siblings):
                if node.name != name:
                    continue
                if not node.is_folder:
                    if depth == len(components) - 1:
                        raise NotAFolderError(node.path)
                    break
                new_node = replace(node, children=rebuild(node.children, depth + 1))
                return siblings[:index] + (new_node,) + siblings[index + 1:]

            raise NotFoundError(PathResolver.canonical(folder_path))

        return rebuild(nodes, 0)

    def _commit(self, new_root: Tree) -> None:
        # A failed save must leave the in-memory tree untouched.
        if self._persistence is not None:
            self._persistence.save(new_root)
        self._root = new_root
        self._notify()

    def _notify(self) -> None:
        # The change is already committed; a failing listener cannot undo it.
        for listener in list(self._listeners):
            try:
                listener(self._root)
            except Exception as e:
                self._logger.exception(
                    'Change listener failed',
                    exc=e,
                    context={'listener': getattr(listener, '__qualname__', repr(listener))}
                )
