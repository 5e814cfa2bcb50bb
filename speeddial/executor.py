"""Run a resolved command by replacing the current process with a shell."""

from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Executor(ABC):
    """Hands a fully resolved command string to the operating system."""

    @abstractmethod
    def run(self, command: str) -> int:
        """Run *command*.

        Implementations that replace the process never return on success;
        a returned value is the exit status to report.
        """
        ...


class ShellExecutor(Executor):
    """``exec`` the configured shell with ``-c <command>``."""

    def __init__(self, shell: str = "bash") -> None:
        self.shell = shell

    def run(self, command: str) -> int:
        binary = shutil.which(self.shell)
        if binary is None:
            logger.error("Shell %r not found on PATH", self.shell)
            return 1

        logger.debug("Executing via %s: %s", binary, command)
        try:
            os.execv(binary, [self.shell, "-c", command])
        except OSError as exc:
            logger.error("Could not execute %r: %s", command, exc)
            return 1
        return 0
