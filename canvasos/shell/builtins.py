"""
Shell Built-in Commands

The terminal's command set. Each command takes the session and its
arguments and returns the lines to print; none of them raises for a
user mistake.
"""

from typing import Callable, List

from canvasos.filesystem import NodeType, PathResolver, TreeStore, ROOT
from canvasos.exceptions import (
    NotFoundError,
    DuplicateNameError,
    NotAFolderError,
    InvalidNameError,
    DepthLimitError,
)
from canvasos.logger import get_logger

from .session import ShellSession


CommandFunc = Callable[[ShellSession, List[str]], List[str]]

HELP_TEXT = [
    'Available commands:',
    '  ls - list directory contents',
    '  cd <path> - change directory',
    '  mkdir <name> - create directory',
    '  pwd - print working directory',
    '  clear - clear terminal',
    '  touch <filename> - create file',
    '  help - show this help',
]


class BuiltinCommands:
    """
    Built-in shell commands.

    Commands read and change the tree only through the TreeStore API.
    """

    def __init__(self, store: TreeStore):
        self._store = store
        self._logger = get_logger('shell')
        self._commands: dict[str, CommandFunc] = {
            'help': self.cmd_help,
            'pwd': self.cmd_pwd,
            'ls': self.cmd_ls,
            'cd': self.cmd_cd,
            'mkdir': self.cmd_mkdir,
            'touch': self.cmd_touch,
            'clear': self.cmd_clear,
        }

    def get_commands(self) -> dict[str, CommandFunc]:
        """Get all built-in commands."""
        return self._commands

    def is_builtin(self, name: str) -> bool:
        """Check if a command is built-in."""
        return name in self._commands

    def execute(self, session: ShellSession, name: str, args: List[str]) -> List[str]:
        """
        Run a built-in command.

        Args:
            session: Session the command runs in
            name: Command name
            args: Command arguments

        Returns:
            Output lines
        """
        cmd = self._commands.get(name)
        if cmd is None:
            return [f"{name}: command not found"]
        return cmd(session, args)

    # Command implementations

    def cmd_help(self, session: ShellSession, args: List[str]) -> List[str]:
        """List the available commands."""
        return list(HELP_TEXT)

    def cmd_pwd(self, session: ShellSession, args: List[str]) -> List[str]:
        """Print working directory."""
        return [session.current_path]

    def cmd_ls(self, session: ShellSession, args: List[str]) -> List[str]:
        """List the current folder."""
        try:
            entries = self._store.list(session.current_path)
        except (NotFoundError, NotAFolderError):
            return [f"ls: {session.current_path}: No such directory"]

        if not entries:
            return ['Directory is empty']

        return [
            f"{'d' if entry.is_folder else '-'}  {entry.name}"
            for entry in entries
        ]

    def cmd_cd(self, session: ShellSession, args: List[str]) -> List[str]:
        """Change directory."""
        if not args:
            session.current_path = ROOT
            return ['Changed to root directory']

        token = args[0]
        resolved = PathResolver.resolve(session.current_path, token)

        if not self._store.is_folder(resolved):
            return [f"cd: {token}: No such directory"]

        session.current_path = PathResolver.canonical(resolved)
        return [f"Changed to {session.current_path}"]

    def cmd_mkdir(self, session: ShellSession, args: List[str]) -> List[str]:
        """Create a folder in the current folder."""
        if not args:
            return ['mkdir: missing operand']

        name = args[0]
        failure = self._create(session, name, NodeType.FOLDER)
        if failure:
            return [f"mkdir: cannot create directory '{name}': {failure}"]
        return [f"Directory '{name}' created"]

    def cmd_touch(self, session: ShellSession, args: List[str]) -> List[str]:
        """Create an empty file in the current folder."""
        if not args:
            return ['touch: missing operand']

        name = args[0]
        failure = self._create(session, name, NodeType.FILE)
        if failure:
            return [f"touch: cannot create file '{name}': {failure}"]
        return [f"File '{name}' created"]

    def cmd_clear(self, session: ShellSession, args: List[str]) -> List[str]:
        """Clear the transcript. The tree is not touched."""
        session.clear()
        return []

    def _create(self, session: ShellSession, name: str, node_type: NodeType) -> str:
        """Create a node; return the failure reason, or '' on success."""
        try:
            self._store.create_node(session.current_path, name, node_type)
        except DuplicateNameError:
            reason = 'File exists'
        except NotAFolderError:
            reason = 'Not a directory'
        except NotFoundError:
            reason = 'No such directory'
        except InvalidNameError:
            reason = 'Invalid name'
        except DepthLimitError:
            reason = 'Too deeply nested'
        else:
            return ''

        self._logger.info(
            "Create rejected",
            context={'parent': session.current_path, 'name': name, 'reason': reason}
        )
        return reason
