"""
File Browser Module

State behind the graphical file explorer: which folder is open, which
file is selected, and the create/delete actions of its toolbar. Drawing
the window is left to the host UI.

Store errors never escape from the toolbar actions; they are logged and
the action reports False, leaving the view unchanged.
"""

from typing import List, Optional

from canvasos.exceptions import FileSystemException
from canvasos.filesystem import Node, NodeType, PathResolver, TreeStore, ROOT
from canvasos.logger import get_logger


class FileBrowser:
    """
    A file explorer window over a TreeStore.

    Example:
        >>> browser = FileBrowser(store)
        >>> browser.open('Documents')
        >>> browser.current_path
        '/Documents'
    """

    def __init__(self, store: TreeStore, start_path: str = ROOT):
        self._store = store
        self._current_path = PathResolver.canonical(start_path)
        self._selected: Optional[str] = None
        self._logger = get_logger('explorer')

    @property
    def current_path(self) -> str:
        return self._current_path

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def items(self) -> List[Node]:
        """Children of the open folder; empty if it no longer exists."""
        try:
            return self._store.list(self._current_path)
        except FileSystemException:
            self._logger.info(
                "Open folder is gone",
                context={'path': self._current_path}
            )
            return []

    def navigate(self, path: str) -> bool:
        """
        Open the folder at ``path``.

        Returns:
            False, with nothing changed, if ``path`` is not a folder
        """
        if not self._store.is_folder(path):
            return False
        self._current_path = PathResolver.canonical(path)
        self._selected = None
        return True

    def open(self, name: str) -> None:
        """Enter a child folder, or select a child file."""
        node = self._find(name)
        if node is None:
            return
        if node.is_folder:
            self.navigate(node.path)
        else:
            self._selected = node.path

    def select(self, path: Optional[str]) -> None:
        self._selected = path

    def go_back(self) -> None:
        """Open the parent folder. Does nothing at root."""
        if PathResolver.is_root(self._current_path):
            return
        self._current_path = PathResolver.parent(self._current_path)
        self._selected = None

    def create_item(self, name: str, node_type: NodeType) -> bool:
        """
        Create a file or folder in the open folder.

        Blank names are ignored; surrounding whitespace is kept, as typed.

        Returns:
            True if the item was created
        """
        if not name.strip():
            return False

        try:
            self._store.create_node(self._current_path, name, node_type)
        except FileSystemException as e:
            self._logger.info(
                f"Create failed: {e.message}",
                context={'parent': self._current_path, 'name': name}
            )
            return False

        return True

    def delete_selected(self) -> bool:
        """
        Delete the selected item and clear the selection.

        Returns:
            True if something was deleted
        """
        if self._selected is None:
            return False

        path = self._selected
        self._selected = None

        try:
            self._store.delete_node(path)
        except FileSystemException as e:
            self._logger.info(f"Delete failed: {e.message}", context={'path': path})
            return False

        return True

    def read_selected(self) -> Optional[str]:
        """Content of the selected file, or None."""
        if self._selected is None:
            return None
        try:
            return self._store.read_content(self._selected)
        except FileSystemException:
            return None

    def _find(self, name: str) -> Optional[Node]:
        for node in self.items():
            if node.name == name:
                return node
        return None
