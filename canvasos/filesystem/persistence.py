"""
Persistence Module

Stores the whole tree as one JSON record in a key-value store, the way a
browser page keeps state in ``localStorage``:
- Key-value store interface with in-memory and JSON-file backends
- Snapshot encoding and validation
- The default tree handed out on first use
- Optional revision check against concurrent writers
"""

import contextlib
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from .node import FileNode, FolderNode, Node, NodeType
from .path_resolver import PathResolver, ROOT, MAX_DEPTH
from canvasos.exceptions import (
    SnapshotCorruptError,
    ConflictError,
    StorageError,
)
from canvasos.logger import get_logger


DEFAULT_STORAGE_KEY = 'os-filesystem'
WELCOME_TEXT = 'Welcome to the virtual OS!'


def default_tree() -> Tuple[Node, ...]:
    """The tree a fresh installation starts with."""
    return (
        FolderNode(
            name='Documents',
            path='/Documents',
            children=(
                FileNode(
                    name='welcome.txt',
                    path='/Documents/welcome.txt',
                    content=WELCOME_TEXT,
                ),
            ),
        ),
        FolderNode(name='Desktop', path='/Desktop'),
    )


class KeyValueStore(ABC):
    """Durable string-to-string storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value under ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; lives as long as the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    A JSON object on disk mapping keys to string values.

    The file is re-read on every access so that separate store objects on
    the same file see each other's writes. Writes go to a temporary file
    that then replaces the original.

    Example:
        >>> kv = JsonFileKeyValueStore('~/.canvasos/storage.json')
        >>> kv.set('os-filesystem', '[]')
    """

    def __init__(self, path: str):
        self._path = Path(path).expanduser()
        self._logger = get_logger('storage')

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(
                f"Store file is not valid JSON: {e}",
                context={'file': str(self._path)}
            ) from e
        except OSError as e:
            raise StorageError(
                f"Cannot read store file: {e}",
                context={'file': str(self._path)}
            ) from e

        if not isinstance(data, dict):
            raise StorageError(
                "Store file must contain a JSON object",
                context={'file': str(self._path)}
            )
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=self._path.name, suffix='.tmp'
            )
        except OSError as e:
            raise StorageError(
                f"Cannot write store file: {e}",
                context={'file': str(self._path)}
            ) from e

        replaced = False
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self._path)
            replaced = True
        except OSError as e:
            raise StorageError(
                f"Cannot write store file: {e}",
                context={'file': str(self._path)}
            ) from e
        finally:
            if not replaced:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)

    def get(self, key: str) -> Optional[str]:
        """
        Raises:
            StorageError: If ``key`` holds something other than a string
        """
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(
                f"Value under {key!r} is not a string",
                key=key,
                context={'file': str(self._path), 'found': type(value).__name__}
            )
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        self._logger.debug("Stored value", context={'key': key, 'bytes': len(value)})

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class PersistenceAdapter:
    """
    Loads and saves tree snapshots under one key.

    Saves overwrite the whole record. By default the last writer wins:
    two consumers that loaded separately can overwrite each other. With
    ``strict=True`` a revision counter kept beside the record makes a
    save fail with ConflictError when someone else saved in between.

    Example:
        >>> adapter = PersistenceAdapter(MemoryKeyValueStore())
        >>> tree = adapter.load()
        >>> [node.name for node in tree]
        ['Documents', 'Desktop']
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        strict: bool = False
    ):
        self._kv = kv_store
        self._key = key
        self._strict = strict
        self._revision: Optional[int] = None
        self._logger = get_logger('persistence')

    @property
    def key(self) -> str:
        return self._key

    @property
    def revision_key(self) -> str:
        return f"{self._key}:revision"

    def load(self) -> Tuple[Node, ...]:
        """
        Return the saved tree, creating the default one if nothing is saved.

        Raises:
            SnapshotCorruptError: If the stored record cannot be decoded
            StorageError: If the backing store cannot be read or holds a
                non-string record under the key
        """
        raw = self._kv.get(self._key)

        if raw is None:
            self._logger.info(
                "No snapshot found, installing default tree",
                context={'key': self._key}
            )
            tree = default_tree()
            self._write(tree)
            return tree

        tree = self.decode(raw)
        self._revision = self._stored_revision()
        self._logger.debug(
            "Loaded snapshot",
            context={'key': self._key, 'top_level': len(tree)}
        )
        return tree

    def save(self, tree: Iterable[Node]) -> None:
        """
        Overwrite the stored snapshot with ``tree``.

        Raises:
            ConflictError: In strict mode, if the record changed since this
                adapter last loaded or saved it
        """
        tree = tuple(tree)

        if self._strict:
            stored = self._stored_revision()
            if stored != self._revision:
                self._logger.warning(
                    "Refusing to overwrite newer snapshot",
                    context={'key': self._key, 'expected': self._revision,
                             'actual': stored}
                )
                raise ConflictError(self._key, expected=self._revision, actual=stored)

        self._write(tree)

    def _write(self, tree: Tuple[Node, ...]) -> None:
        self._kv.set(self._key, self.encode(tree))
        revision = (self._stored_revision() or 0) + 1
        self._kv.set(self.revision_key, str(revision))
        self._revision = revision
        self._logger.debug(
            "Saved snapshot",
            context={'key': self._key, 'revision': revision}
        )

    def _stored_revision(self) -> Optional[int]:
        raw = self._kv.get(self.revision_key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            self._logger.warning(
                "Ignoring unreadable revision counter",
                context={'key': self.revision_key, 'value': raw}
            )
            return None

    # Encoding

    @staticmethod
    def encode(tree: Iterable[Node]) -> str:
        """Serialize a top-level sequence to the JSON record."""
        return json.dumps([node.to_dict() for node in tree])

    def decode(self, raw: str) -> Tuple[Node, ...]:
        """
        Parse a JSON record into nodes.

        Paths are rebuilt from names. A stored path that disagrees is
        replaced, and a repeated sibling name keeps only the first entry;
        both are logged.

        Raises:
            SnapshotCorruptError: If the record is not a list of node objects,
                or nests deeper than MAX_DEPTH
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SnapshotCorruptError(self._key, reason=f"invalid JSON: {e}") from e
        except RecursionError:
            raise SnapshotCorruptError(self._key, reason="nested too deeply") from None

        if not isinstance(data, list):
            raise SnapshotCorruptError(self._key, reason="top level is not a list")

        return self._decode_children(data, ROOT)

    def _decode_children(self, items: List[Any], parent_path: str) -> Tuple[Node, ...]:
        nodes: List[Node] = []
        seen: set[str] = set()

        for item in items:
            node = self._decode_node(item, parent_path)
            if node.name in seen:
                self._logger.warning(
                    "Dropping duplicate entry from snapshot",
                    context={'path': node.path}
                )
                continue
            seen.add(node.name)
            nodes.append(node)

        return tuple(nodes)

    def _decode_node(self, item: Any, parent_path: str) -> Node:
        if not isinstance(item, dict):
            raise SnapshotCorruptError(
                self._key, reason=f"entry under {parent_path} is not an object"
            )

        name = item.get('name')
        if not isinstance(name, str) or not PathResolver.is_valid_name(name):
            raise SnapshotCorruptError(
                self._key, reason=f"invalid name {name!r} under {parent_path}"
            )

        path = PathResolver.join(parent_path, name)
        if PathResolver.get_depth(path) > MAX_DEPTH:
            raise SnapshotCorruptError(
                self._key, reason=f"{path} is deeper than {MAX_DEPTH} levels"
            )

        stored_path = item.get('path')
        if stored_path != path:
            self._logger.warning(
                "Correcting stored path",
                context={'stored': stored_path, 'path': path}
            )

        try:
            node_type = NodeType(item.get('type'))
        except ValueError:
            raise SnapshotCorruptError(
                self._key, reason=f"unknown type {item.get('type')!r} at {path}"
            ) from None

        if node_type is NodeType.FILE:
            content = item.get('content', '')
            if content is None:
                content = ''
            if not isinstance(content, str):
                raise SnapshotCorruptError(
                    self._key, reason=f"content at {path} is not a string"
                )
            return FileNode(name=name, path=path, content=content)

        children = item.get('children') or []
        if not isinstance(children, list):
            raise SnapshotCorruptError(
                self._key, reason=f"children at {path} is not a list"
            )
        return FolderNode(
            name=name,
            path=path,
            children=self._decode_children(children, path),
        )
