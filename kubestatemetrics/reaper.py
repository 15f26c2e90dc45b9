"""Reaping of zombie child processes when running as process 1."""

from __future__ import annotations

import logging
import os
import signal
import sys

logger = logging.getLogger(__name__)


def reap_children() -> list[int]:
    """Collect every child that has exited, without blocking.

    Returns the pids that were reaped.
    """
    reaped: list[int] = []
    while True:
        try:
            pid, _ = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            break
        if pid < 1:
            break
        logger.debug("Reaped process with pid %d", pid)
        reaped.append(pid)
    return reaped


def _on_sigchld(signum: int, frame: object) -> None:
    logger.debug("Signal received: %s", signum)
    reap_children()


def start_reaper() -> bool:
    """Reap children on SIGCHLD if this is process 1 on Linux.

    Returns True if the reaper was installed. Has no effect elsewhere.
    """
    if not sys.platform.startswith("linux"):
        return False
    if os.getpid() != 1:
        return False
    sigchld = getattr(signal, "SIGCHLD", None)
    if sigchld is None:
        return False
    logger.debug("Launching reaper")
    signal.signal(sigchld, _on_sigchld)
    return True