"""Error types shared by the node manager.

Two outcomes matter to the menu loop:
  StepError    a critical step failed, the process stops
  StepWarning  a best-effort step failed, it is reported and skipped
"""

from typing import Sequence


class CommandError(Exception):
    """An external command exited with a non-zero status."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        message = f"'{' '.join(self.cmd)}' exited with code {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class InvalidPrivateKey(ValueError):
    """The entered private key is not 64 hexadecimal characters."""

    def __init__(self) -> None:
        super().__init__(
            "Invalid private key format. Please enter a 64-character hexadecimal string."
        )


class UnsupportedHost(Exception):
    """The host is not a Debian/Ubuntu-family system."""


class StepError(Exception):
    """Critical step failure that stops the whole process."""

    def __init__(self, step: str, cause: Exception | str):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause


class StepWarning(Exception):
    """Non-critical step failure; the action carries on."""

    def __init__(self, step: str, cause: Exception | str):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause
