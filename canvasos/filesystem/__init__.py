"""
CanvasOS Virtual File System Module

The shared tree of folders and files:
- Immutable file and folder nodes
- Single-token path resolution
- The tree store and its mutation operations
- Snapshot persistence in a key-value store
"""

from .node import Node, FileNode, FolderNode, NodeType
from .path_resolver import PathResolver, ROOT, MAX_DEPTH
from .tree_store import TreeStore
from .persistence import (
    PersistenceAdapter,
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    default_tree,
    DEFAULT_STORAGE_KEY,
)

__all__ = [
    # Nodes
    'Node',
    'FileNode',
    'FolderNode',
    'NodeType',
    # Path Resolver
    'PathResolver',
    'ROOT',
    'MAX_DEPTH',
    # Store
    'TreeStore',
    # Persistence
    'PersistenceAdapter',
    'KeyValueStore',
    'MemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'default_tree',
    'DEFAULT_STORAGE_KEY',
]
