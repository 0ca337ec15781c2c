"""
CanvasOS - a shared virtual filesystem for a desktop-style environment

The mini-applications of the desktop (terminal, file explorer) all work on
one tree of folders and files, persisted as a single snapshot record.
"""

__version__ = "1.0.0"

from .filesystem import (
    TreeStore,
    PathResolver,
    PersistenceAdapter,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    NodeType,
)
from .shell import CommandInterpreter, Shell, ShellSession, create_shell
from .explorer import FileBrowser

__all__ = [
    'TreeStore',
    'PathResolver',
    'PersistenceAdapter',
    'MemoryKeyValueStore',
    'JsonFileKeyValueStore',
    'NodeType',
    'CommandInterpreter',
    'Shell',
    'ShellSession',
    'create_shell',
    'FileBrowser',
]
