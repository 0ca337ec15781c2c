"""
CanvasOS Shell Module

The command interpreter and the interactive terminal built on it.

The interpreter holds only the tree it drives; everything a terminal
remembers lives in the ShellSession passed to each call.
"""

from typing import Callable, List, Optional

from canvasos.core.config_loader import get_config
from canvasos.exceptions import CanvasOSError
from canvasos.filesystem import TreeStore
from canvasos.logger import get_logger

from .builtins import BuiltinCommands
from .parser import CommandParser
from .session import ShellSession


# Commands that leave no transcript entry behind.
UNRECORDED_COMMANDS = frozenset({'clear'})


class CommandInterpreter:
    """
    Parses and runs shell lines against a tree.

    Example:
        >>> interpreter = CommandInterpreter(TreeStore())
        >>> session = ShellSession()
        >>> interpreter.submit(session, 'mkdir Docs')
        ["Directory 'Docs' created"]
        >>> interpreter.submit(session, 'ls')
        ['d  Docs']
    """

    def __init__(self, store: TreeStore):
        self._store = store
        self._parser = CommandParser()
        self._builtins = BuiltinCommands(store)
        self._logger = get_logger('shell')

    @property
    def store(self) -> TreeStore:
        return self._store

    @property
    def parser(self) -> CommandParser:
        return self._parser

    @property
    def builtins(self) -> BuiltinCommands:
        return self._builtins

    def new_session(self) -> ShellSession:
        """A session showing the configured welcome banner."""
        config = get_config()
        return ShellSession.start(config.shell.banner, config.shell.banner_hint)

    def submit(self, session: ShellSession, line: str) -> List[str]:
        """
        Run one input line.

        Blank lines do nothing. ``clear`` empties the transcript. Every
        other line, recognised or not, is recorded with its output.

        Args:
            session: Session to run in
            line: Raw input line

        Returns:
            Output lines produced by the command
        """
        session.history_cursor = -1
        session.input_buffer = ''

        cmd = self._parser.parse(line)
        if cmd is None:
            return []

        try:
            output = self._builtins.execute(session, cmd.command, cmd.args)
        except CanvasOSError as e:
            self._logger.warning(
                f"Command failed: {e.message}",
                context={'command': cmd.command, 'error_code': e.error_code}
            )
            output = [f"{cmd.command}: {e.message}"]

        if cmd.command not in UNRECORDED_COMMANDS:
            session.record(line, output)

        return output

    def history_previous(self, session: ShellSession) -> str:
        """
        Step one command further back in history.

        Stops at the oldest command.

        Returns:
            The new input buffer
        """
        commands = session.history()
        if commands and session.history_cursor < len(commands) - 1:
            session.history_cursor += 1
            session.input_buffer = commands[len(commands) - 1 - session.history_cursor]
        return session.input_buffer

    def history_next(self, session: ShellSession) -> str:
        """
        Step one command forward in history.

        Leaving the most recent command empties the buffer.

        Returns:
            The new input buffer
        """
        if session.history_cursor > 0:
            commands = session.history()
            session.history_cursor -= 1
            session.input_buffer = commands[len(commands) - 1 - session.history_cursor]
        elif session.history_cursor == 0:
            session.history_cursor = -1
            session.input_buffer = ''
        return session.input_buffer


class Shell:
    """
    Interactive terminal.

    Pairs one interpreter with one session and drives them from a line
    reader (``input`` by default).

    Example:
        >>> shell = Shell(TreeStore())
        >>> shell.run()
    """

    def __init__(
        self,
        store: TreeStore,
        session: Optional[ShellSession] = None,
        output: Callable[[str], None] = print
    ):
        self._interpreter = CommandInterpreter(store)
        self._session = session or self._interpreter.new_session()
        self._output = output
        self._logger = get_logger('shell')
        self._running = False

    @property
    def session(self) -> ShellSession:
        return self._session

    @property
    def interpreter(self) -> CommandInterpreter:
        return self._interpreter

    @property
    def cwd(self) -> str:
        return self._session.current_path

    def prompt(self) -> str:
        """Build the prompt, e.g. ``user@virtual-os:/Docs$ ``."""
        config = get_config()
        return f"{config.shell.user}@{config.shell.hostname}:{self.cwd}$ "

    def execute(self, line: str) -> List[str]:
        """Run one line and print its output."""
        output = self._interpreter.submit(self._session, line)
        for text in output:
            self._output(text)
        return output

    def run(self, read_line: Callable[[str], str] = input) -> None:
        """
        Run the interactive loop until end of input.

        Args:
            read_line: Called with the prompt; returns the next line
        """
        self._running = True

        for entry in self._session.transcript:
            if entry.banner:
                self._output(entry.command)
                for text in entry.output:
                    self._output(text)

        while self._running:
            try:
                line = read_line(self.prompt())
            except EOFError:
                self._output('')
                break
            except KeyboardInterrupt:
                self._output('^C')
                continue

            self.execute(line)

        self._running = False

    def stop(self) -> None:
        """Stop the loop after the current line."""
        self._running = False

    def run_script(self, script: str) -> List[str]:
        """
        Run several lines, skipping blanks and ``#`` comments.

        Returns:
            All output lines, in order
        """
        collected: List[str] = []

        for line in script.splitlines():
            line = line.strip()
            if line and not line.startswith('#'):
                collected.extend(self.execute(line))

        return collected


def create_shell(store: TreeStore) -> Shell:
    """Factory function to create a shell."""
    return Shell(store)
