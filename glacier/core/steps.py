"""Single place that decides whether a failed step stops the process.

Each step is a plain callable. Failures surface as exceptions and are mapped
here: a critical step raises StepError (the menu loop exits with status 1),
a best-effort step is recorded as a StepWarning and the action continues.
"""

import logging
from typing import Any, Callable, List, Optional

from glacier.core.console import Console
from glacier.core.errors import (
    CommandError,
    InvalidPrivateKey,
    StepError,
    StepWarning,
    UnsupportedHost,
)

logger = logging.getLogger(__name__)

STEP_FAILURES = (CommandError, InvalidPrivateKey, UnsupportedHost, StepWarning)


class StepRunner:
    """Runs named steps and keeps the warnings of best-effort ones."""

    def __init__(self, console: Console):
        self.console = console
        self.warnings: List[StepWarning] = []

    def run(
        self,
        name: str,
        func: Callable[..., Any],
        *args: Any,
        critical: bool = True,
        **kwargs: Any,
    ) -> Optional[Any]:
        """Run ``func`` and return its result.

        Returns None when a best-effort step fails.
        """
        logger.debug("Step started: %s", name)
        try:
            result = func(*args, **kwargs)
        except STEP_FAILURES as e:
            if critical:
                logger.error("Critical step failed: %s (%s)", name, e)
                raise StepError(name, e) from e
            warning = e if isinstance(e, StepWarning) else StepWarning(name, e)
            self.warnings.append(warning)
            logger.warning("Step failed, continuing: %s (%s)", name, e)
            self.console.warn(f"  {name} failed, continuing: {warning.cause}")
            return None
        logger.debug("Step finished: %s", name)
        return result

    def best_effort(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Any]:
        return self.run(name, func, *args, critical=False, **kwargs)
