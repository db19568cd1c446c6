"""Thin subprocess wrapper used by every service.

Commands are argv lists, never shell strings. A non-zero exit status raises
CommandError when ``check`` is set; a missing binary is reported the same way
with exit status 127, and a command that outlives the timeout with 124.
"""

import logging
import os
import subprocess
from typing import Dict, List, Optional, Sequence

from glacier.core.errors import CommandError

logger = logging.getLogger(__name__)

# Root detection: when running as root (e.g., inside a container),
# sudo is unnecessary and may not even be installed.
IS_ROOT = (os.getuid() == 0) if hasattr(os, 'getuid') else False


def _sudo() -> List[str]:
    """Return ['sudo'] prefix, or [] if already running as root."""
    return [] if IS_ROOT else ['sudo']


class CommandRunner:
    """Runs external commands with sudo prefixing and exit-status checks."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout

    def run(
        self,
        cmd: Sequence[str],
        *,
        sudo: bool = False,
        check: bool = True,
        capture: bool = False,
        input: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command to completion.

        ``env`` entries are added on top of the current environment, which
        keeps secrets off the argument vector.
        """
        argv = [*(_sudo() if sudo else []), *cmd]
        logger.debug("Running: %s", " ".join(argv))
        child_env = {**os.environ, **env} if env else None
        try:
            result = subprocess.run(
                argv,
                capture_output=capture,
                text=True,
                input=input,
                env=child_env,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            if check:
                raise CommandError(argv, 127, f"{argv[0]}: command not found")
            return subprocess.CompletedProcess(argv, 127, "", "")
        except subprocess.TimeoutExpired:
            logger.warning("Timed out after %ss: %s", self.timeout, " ".join(argv))
            if check:
                raise CommandError(argv, 124, f"timed out after {self.timeout}s")
            return subprocess.CompletedProcess(argv, 124, "", "")
        if check and result.returncode != 0:
            raise CommandError(argv, result.returncode, result.stderr if capture else "")
        return result

    def succeeds(self, cmd: Sequence[str], *, sudo: bool = False) -> bool:
        """True when the command exits 0. Output is discarded."""
        return self.run(cmd, sudo=sudo, check=False, capture=True).returncode == 0

    def output(self, cmd: Sequence[str], *, sudo: bool = False) -> str:
        """Stdout of a command that must succeed, stripped."""
        return self.run(cmd, sudo=sudo, capture=True).stdout.strip()

    def stream(self, cmd: Sequence[str]) -> int:
        """Run attached to the terminal until it exits or Ctrl+C.

        Returns the exit status; an interrupt returns 130 instead of
        propagating, so the caller goes back to its menu.
        """
        argv = list(cmd)
        logger.debug("Streaming: %s", " ".join(argv))
        try:
            return subprocess.run(argv).returncode
        except KeyboardInterrupt:
            return 130
        except FileNotFoundError:
            raise CommandError(argv, 127, f"{argv[0]}: command not found")
