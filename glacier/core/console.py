"""Coloured terminal output and interactive prompts."""

import getpass
import sys
from typing import Callable, Optional


# ANSI color codes
class Color:
    RESET = '\033[0m'
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'


CLEAR_SCREEN = '\033[2J\033[H'


class Console:
    """Human-facing status lines, kept apart from logging.

    ``input_func`` and ``secret_func`` are injectable so tests can script
    the operator's answers.
    """

    def __init__(
        self,
        color_enabled: bool = True,
        input_func: Optional[Callable[[str], str]] = None,
        secret_func: Optional[Callable[[str], str]] = None,
        out=None,
    ):
        self.color_enabled = color_enabled
        self._input = input_func or input
        self._secret = secret_func or getpass.getpass
        self._out = out

    def _colorize(self, text: str, color: str) -> str:
        if not self.color_enabled:
            return text
        return f"{color}{text}{Color.RESET}"

    def print(self, text: str = '', color: Optional[str] = None) -> None:
        line = self._colorize(text, color) if color else text
        print(line, file=self._out or sys.stdout, flush=True)

    def info(self, text: str) -> None:
        self.print(text, Color.GREEN)

    def warn(self, text: str) -> None:
        self.print(text, Color.YELLOW)

    def error(self, text: str) -> None:
        self.print(text, Color.RED)

    def status_line(self, label: str, running: bool) -> None:
        state = self._colorize('Running', Color.GREEN) if running else self._colorize('Not running', Color.RED)
        self.print(f"{label}: {state}")

    def clear(self) -> None:
        out = self._out or sys.stdout
        if self.color_enabled and out.isatty():
            out.write(CLEAR_SCREEN)
            out.flush()

    def ask(self, prompt: str = '') -> str:
        """Read one line. EOFError and KeyboardInterrupt propagate."""
        return self._input(prompt)

    def ask_secret(self, prompt: str) -> str:
        """Read one line without echoing it."""
        return self._secret(self._colorize(prompt, Color.YELLOW))

    def pause(self) -> None:
        try:
            self._input("Press Enter to return to menu...")
        except EOFError:
            pass
