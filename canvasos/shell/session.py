"""
Shell Session Module

Per-terminal state: the current folder, the transcript shown on screen
and the position while browsing command history. Each terminal owns its
own session, so several can run against one tree side by side.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from canvasos.filesystem.path_resolver import ROOT


@dataclass
class TranscriptEntry:
    """One command and the lines it printed."""
    command: str
    output: List[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)
    banner: bool = False


@dataclass
class ShellSession:
    """
    State of one terminal.

    Attributes:
        current_path: Absolute path of the current folder
        transcript: Commands and output, oldest first
        history_cursor: Steps back into history, -1 when not browsing
        input_buffer: Pending input line
    """
    current_path: str = ROOT
    transcript: List[TranscriptEntry] = field(default_factory=list)
    history_cursor: int = -1
    input_buffer: str = ''

    @classmethod
    def start(cls, banner: str, hint: str) -> 'ShellSession':
        """A fresh session showing the welcome banner."""
        session = cls()
        session.transcript.append(
            TranscriptEntry(command=banner, output=[hint], banner=True)
        )
        return session

    def record(self, command: str, output: List[str]) -> TranscriptEntry:
        entry = TranscriptEntry(command=command, output=list(output))
        self.transcript.append(entry)
        return entry

    def clear(self) -> None:
        self.transcript.clear()

    def history(self) -> List[str]:
        """Commands typed so far, oldest first, without the banner."""
        return [entry.command for entry in self.transcript if not entry.banner]

    def last_output(self) -> Optional[List[str]]:
        if not self.transcript:
            return None
        return self.transcript[-1].output
