"""
Command executors.

The executor is the only boundary between mpdev and the operating system.
Resources never call subprocess directly: they hand a command name and an
ordered argument list to the registry, which forwards it here. Return codes
are interpreted by the registry, not by the executor.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: str
    args: List[str] = field(default_factory=list)
    returncode: int = 0
    stdout: bytes = b""
    stderr: bytes = b""
    cwd: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]


class CommandExecutor(ABC):
    """
    Base class for command executors.

    Implementations run `command` with `args` (optionally in `cwd`) and
    report the exit status and captured output. A command that cannot be
    started at all raises OSError.

    Executors with `dry_run` set only record commands; resources check it
    before touching the local filesystem themselves.
    """

    dry_run = False

    @abstractmethod
    def run(self, command: str, *args: str, cwd: Optional[str] = None) -> CommandResult:
        """
        Run an external command and wait for it to finish.

        Args:
            command: Executable name or path
            *args: Command arguments, in order
            cwd: Working directory for the command (default: current)

        Returns:
            CommandResult with return code and captured output

        Raises:
            OSError: If the command could not be started
        """
        pass


class SubprocessExecutor(CommandExecutor):
    """Runs commands as OS processes via subprocess.run."""

    def run(self, command: str, *args: str, cwd: Optional[str] = None) -> CommandResult:
        argv = [command, *args]
        logger.debug(f"Running: {' '.join(argv)}", extra={"event": "command_started"})

        result = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
        )

        logger.debug(
            f"Command exited with {result.returncode}: {command}",
            extra={
                "event": "command_finished",
                "metadata": {"returncode": result.returncode},
            },
        )

        return CommandResult(
            command=command,
            args=list(args),
            returncode=result.returncode,
            stdout=result.stdout or b"",
            stderr=result.stderr or b"",
            cwd=cwd,
        )


class DryRunExecutor(CommandExecutor):
    """
    Logs commands instead of running them.

    Every call succeeds with empty output. Calls are kept in `calls` so the
    CLI can print what would have run.
    """

    dry_run = True

    def __init__(self) -> None:
        self.calls: List[CommandResult] = []

    def run(self, command: str, *args: str, cwd: Optional[str] = None) -> CommandResult:
        result = CommandResult(command=command, args=list(args), cwd=cwd)
        self.calls.append(result)
        where = f" (in {cwd})" if cwd else ""
        logger.info(
            f"[dry-run] {' '.join(result.argv)}{where}",
            extra={"event": "command_skipped"},
        )
        return result
