"""Process invocation — run external tools and collect their outcome."""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

# Exit statuses reported when the executable cannot be launched.
NOT_FOUND_EXIT = 127
NOT_EXECUTABLE_EXIT = 126


@dataclass
class CommandResult:
    """Completion status and combined stdout/stderr of one command."""

    args: list[str]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[..., CommandResult]


def run_command(
    args: Sequence[str],
    cwd: str | Path | None = None,
    stream: bool = False,
) -> CommandResult:
    """Run a command to completion.

    Args:
        args: Program and arguments.
        cwd: Working directory for the command.
        stream: Echo output to stderr line by line as it is produced. Output
                is still collected so it can be reported on failure.

    Returns:
        A ``CommandResult``. A command that cannot be launched yields exit
        code 127 (missing) or 126 (not executable, bad cwd) rather than an
        exception.
    """
    argv = [str(a) for a in args]
    logger.debug("Running %s (cwd=%s)", shlex.join(argv), cwd or ".")

    try:
        if not stream:
            proc = subprocess.run(
                argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
            return CommandResult(args=argv, returncode=proc.returncode, output=proc.stdout or "")

        lines: list[str] = []
        with subprocess.Popen(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        ) as proc:
            for line in proc.stdout:
                sys.stderr.write(line)
                lines.append(line)
        return CommandResult(args=argv, returncode=proc.returncode, output="".join(lines))
    except OSError as e:
        returncode = NOT_FOUND_EXIT if isinstance(e, FileNotFoundError) else NOT_EXECUTABLE_EXIT
        message = f"Cannot run {argv[0]}: {e}\n"
        if stream:
            sys.stderr.write(message)
        return CommandResult(args=argv, returncode=returncode, output=message)
