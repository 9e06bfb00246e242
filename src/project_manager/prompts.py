"""Line-based interactive prompts.

Registry operations ask questions through a Prompter so tests can script
the answers instead of driving a real terminal.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO


class Prompter(ABC):
    """Asks the user for one line of input."""

    @abstractmethod
    def prompt(self, message: str) -> str:
        """Show message and return the user's answer without the newline."""


class StdPrompter(Prompter):
    """Prompter backed by text streams (stdin/stdout by default)."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self._stdin = stdin
        self._stdout = stdout

    def prompt(self, message: str) -> str:
        """Write message, read one line and strip surrounding whitespace.

        Raises:
            EOFError: If the input stream is exhausted.
        """
        stdin = self._stdin or sys.stdin
        stdout = self._stdout or sys.stdout
        stdout.write(message)
        stdout.flush()
        line = stdin.readline()
        if not line:
            raise EOFError("No input available")
        return line.strip()


def confirm(prompter: Prompter, message: str) -> bool:
    """Ask a yes/no question. Only "y" or "yes" count as yes."""
    return prompter.prompt(message).lower() in ("y", "yes")
