"""
Command Parser Module

Splits a shell line into a verb and its arguments. There is no quoting
or escaping: arguments are whitespace-separated words.
"""

from dataclasses import dataclass, field
from typing import Optional, List


@dataclass
class ParsedCommand:
    """A parsed command line."""
    command: str
    args: List[str] = field(default_factory=list)
    raw: str = ''

    @property
    def first_arg(self) -> Optional[str]:
        return self.args[0] if self.args else None


class CommandParser:
    """
    Parses shell command lines.

    Example:
        >>> parser = CommandParser()
        >>> cmd = parser.parse("mkdir Docs")
        >>> cmd.command, cmd.args
        ('mkdir', ['Docs'])
    """

    def parse(self, line: str) -> Optional[ParsedCommand]:
        """
        Parse a command line.

        The verb is lower-cased; arguments keep their case.

        Args:
            line: Command line string

        Returns:
            ParsedCommand, or None for a blank line
        """
        words = line.split()

        if not words:
            return None

        return ParsedCommand(
            command=words[0].lower(),
            args=words[1:],
            raw=line,
        )
