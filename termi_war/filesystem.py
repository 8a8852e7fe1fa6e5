"""Filesystem-initialization task boundary.

Committing a target directory hands a zero-argument task to a dispatcher.
The production dispatcher starts it on a daemon thread and never joins it:
there is no completion signal and no result flows back to the shell.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

FilesystemTask = Callable[[], None]
TaskDispatcher = Callable[[FilesystemTask], None]


def noop_filesystem_init() -> None:
    """Placeholder until the filesystem layer exists."""


def dispatch_in_background(task: FilesystemTask) -> None:
    """Start ``task`` on a daemon thread without waiting for it."""

    def _runner() -> None:
        try:
            task()
        except Exception:
            # Nothing can observe this thread; the log is the only trace.
            logger.exception("Filesystem initialization task failed")

    threading.Thread(target=_runner, name="fs-init", daemon=True).start()
    logger.debug("Dispatched filesystem initialization task")


def dispatch_inline(task: FilesystemTask) -> None:
    """Run ``task`` on the calling thread. Used by headless tests and tools."""
    task()
