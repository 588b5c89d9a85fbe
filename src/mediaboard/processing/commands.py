"""
External command execution for the thumbnail engines.

Commands are always passed to the operating system as argument lists, so
paths with spaces or shell metacharacters need no quoting. ``shlex.join``
is only used to render a copy-pasteable command line for the logs.
"""

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from mediaboard.core.exceptions import EngineUnavailableError


DEFAULT_TIMEOUT = 60.0


@dataclass
class CommandResult:
    """Outcome of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner:
    """
    Run external binaries with a bounded wait.

    Args:
        timeout: Seconds before the child is killed; None waits indefinitely
    """

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self.logger = logging.getLogger("mediaboard.processing.commands")

    @staticmethod
    def which(binary: Union[str, Path]) -> Optional[str]:
        """Resolve a binary name or path to an executable, or None."""
        return shutil.which(str(binary))

    def resolve(self, binary: Union[str, Path]) -> str:
        """
        Resolve a binary or raise.

        Raises:
            EngineUnavailableError: If the binary cannot be found
        """
        path = self.which(binary)
        if path is None:
            raise EngineUnavailableError(str(binary))
        return path

    def run(self, binary: Union[str, Path], args: Sequence[Union[str, Path]]) -> CommandResult:
        """
        Run ``binary`` with ``args`` and capture its output.

        Raises:
            EngineUnavailableError: If the binary cannot be found or started
        """
        argv: List[str] = [self.resolve(binary)] + [str(a) for a in args]
        self.logger.debug(f"Running: {shlex.join(argv)}")

        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            self.logger.warning(f"Command timed out after {self.timeout}s: {shlex.join(argv)}")
            return CommandResult(
                returncode=-1,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
                timed_out=True
            )
        except FileNotFoundError as e:
            raise EngineUnavailableError(str(binary), cause=e) from e

        self.logger.debug(f"{Path(argv[0]).name} returned {completed.returncode}")
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or ""
        )


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors='replace')
    return value
