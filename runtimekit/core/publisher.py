"""
Environment and output publishing for the host process.

The installer reports its result through an EnvironmentPublisher so that
resolution logic stays free of process-global side effects. The GitHub
Actions publisher follows the runner file protocol: each call appends to the
file named by GITHUB_ENV, GITHUB_PATH or GITHUB_OUTPUT.
"""

import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import MutableMapping, Optional

logger = logging.getLogger(__name__)


class EnvironmentPublisher(ABC):
    """
    Abstract sink for environment variables, search path entries and outputs.

    Implementations must be idempotent: publishing the same value twice has
    the same effect as publishing it once.
    """

    @abstractmethod
    def set_variable(self, name: str, value: str) -> None:
        """Export an environment variable for subsequent processes."""
        pass

    @abstractmethod
    def prepend_path(self, directory: str) -> None:
        """Prepend a directory to the executable search path."""
        pass

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Set a named output of the current step."""
        pass


class GitHubActionsPublisher(EnvironmentPublisher):
    """
    Publishes through the GitHub Actions runner command files.

    Values are mirrored into the current process environment too. When a
    command file variable is unset (e.g. running outside a runner) only the
    process environment is updated.
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        """
        Initialize publisher.

        Args:
            environ: Environment mapping to read file locations from and
                mirror values into (default: os.environ)
        """
        self.environ = os.environ if environ is None else environ

    def set_variable(self, name: str, value: str) -> None:
        self.environ[name] = value
        self._append_command("GITHUB_ENV", name, value)
        logger.debug(f"Exported {name}={value}")

    def prepend_path(self, directory: str) -> None:
        current = self.environ.get("PATH", "")
        entries = current.split(os.pathsep) if current else []
        if directory not in entries:
            self.environ["PATH"] = os.pathsep.join([directory, *entries])

        command_file = self.environ.get("GITHUB_PATH")
        if command_file:
            with open(command_file, "a", encoding="utf-8") as f:
                f.write(f"{directory}\n")
        logger.debug(f"Added {directory} to PATH")

    def set_output(self, name: str, value: str) -> None:
        if not self._append_command("GITHUB_OUTPUT", name, value):
            logger.info(f"Output {name}={value}")

    def _append_command(self, file_variable: str, name: str, value: str) -> bool:
        command_file = self.environ.get(file_variable)
        if not command_file:
            return False

        path = Path(command_file)
        with open(path, "a", encoding="utf-8") as f:
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{name}={value}\n")
        return True


__all__ = [
    "EnvironmentPublisher",
    "GitHubActionsPublisher",
]
