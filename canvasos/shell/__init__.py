"""
CanvasOS Shell Module

The terminal application:
- Command parsing
- Built-in commands
- Per-terminal sessions with transcript and history
- The interactive loop
"""

from .parser import CommandParser, ParsedCommand
from .session import ShellSession, TranscriptEntry
from .builtins import BuiltinCommands, HELP_TEXT
from .shell import CommandInterpreter, Shell, create_shell

__all__ = [
    'CommandParser',
    'ParsedCommand',
    'ShellSession',
    'TranscriptEntry',
    'BuiltinCommands',
    'HELP_TEXT',
    'CommandInterpreter',
    'Shell',
    'create_shell',
]
